"""Centralized user-facing error messages and log templates."""

from __future__ import annotations


class ErrorMessages:
    """Error message strings raised by the domain and adapters."""

    # Track Validation Errors
    EMPTY_LOCATOR = "Locator cannot be empty"

    # Queue Errors
    INVALID_SKIP_POSITION = "Skip position must be between 1 and {max_position}, got {position}"
    HISTORY_EMPTY = "There is no previous track to go back to"
    QUEUE_EMPTY = "The queue is empty"
    INVALID_TRANSITION = "Cannot transition from {state} on {trigger}"
    NO_SESSION_TARGET = "No session target to open the audio sink on"

    # Provider Errors
    PROVIDER_NO_RESULT = "No result found for '{locator}'"
    PROVIDER_EXTRACT_FAILED = "Failed to extract metadata for '{locator}': {error}"
    PLAYLIST_EMPTY = "Playlist '{url}' has no playable tracks"
    NOT_A_PLAYLIST = "'{url}' is not a playlist"

    # Sink Errors
    SINK_NOT_CONNECTED = "Audio sink is not connected"
    SINK_TARGET_NOT_VOICE = "Session target is not a voice channel"
    SINK_VOICE_FAILED = "Voice {operation} failed: {error}"
    SINK_STREAM_FAILED = "Could not start streaming '{locator}': {error}"
    SINK_REPORTED_ERROR = "Audio sink reported an error: {error}"

    # Time/Date Validation Errors
    TIMEZONE_REQUIRED = "datetime must be timezone-aware"

    # Settings Errors
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Queue Operations
    QUEUE_SONG_ADDED = "Added '%s' to the queue (length %d)"
    QUEUE_PLAYLIST_ADDED = "Added %d tracks from playlist '%s' (length %d)"
    QUEUE_PLAYLIST_MEMBER_FAILED = "Skipping playlist entry %s: %s"
    QUEUE_SHUFFLED = "Shuffled %d tracks (held front: %s)"
    QUEUE_SKIPPED = "Skipping '%s' to position %d"
    QUEUE_STOPPED = "Stopped playback and cleared %d tracks"
    QUEUE_PREVIOUS = "Restoring previous track '%s'"
    QUEUE_LOOP_CHANGED = "Loop mode changed to %s"
    QUEUE_HISTORY_EVICTED = "History full, evicted '%s'"

    # Playback Lifecycle
    PLAYBACK_ALREADY_PLAYING = "Already playing, ignoring play request"
    PLAYBACK_STARTED = "Now playing '%s'"
    PLAYBACK_PAUSED = "Paused '%s'"
    PLAYBACK_RESUMED = "Resumed '%s'"
    PLAYBACK_PAUSE_REJECTED = "Sink rejected %s request"
    PLAYBACK_FINISHED = "Track '%s' finished (reason=%s)"
    PLAYBACK_QUEUE_EMPTY = "Queue exhausted, going idle"
    PLAYBACK_IDLE_IGNORED = "Ignoring idle notification in state %s"
    PLAYBACK_SINK_STATUS = "Sink reported %s"
    PLAYBACK_SINK_ERROR = "Sink error: %s"
    PLAYBACK_STALE_STATUS = "Ignoring %s status from a stale connection"
    PLAYBACK_STALE_STREAM = "Ignoring %s status from stream %s"
    PLAYBACK_NOTIFICATION_FAILED = "Error handling sink status %s"
    SINK_CLOSE_FAILED = "Error closing sink connection: %s"

    # Event Bus
    EVENT_SUBSCRIBED = "Subscribed handler to: %s"
    EVENT_UNSUBSCRIBED = "Unsubscribed handler from %s"
    EVENT_NO_HANDLERS = "No handlers for %s"
    EVENT_PUBLISHING = "Publishing %s to %d handlers"
    EVENT_HANDLER_FAILED = "Error in handler for %s"
    EVENT_HANDLERS_CLEARED = "Cleared all event handlers"

    # Registry
    REGISTRY_CREATED = "Created queue engine for guild %s"
    REGISTRY_REMOVED = "Removed queue engine for guild %s"

    # yt-dlp Provider
    YTDLP_FETCHING = "Fetching metadata for %s"
    YTDLP_SEARCHING = "Searching for '%s'"
    YTDLP_PLAYLIST_FETCHING = "Fetching playlist %s"
    YTDLP_FAILED_EXTRACT = "yt-dlp failed to extract %s"
    PROVIDER_FAILED = "Could not resolve %s: %s"

    # Voice Sink
    VOICE_CONNECTED = "Connected to voice channel %s"
    VOICE_DISCONNECTED = "Disconnected from voice channel %s"
    VOICE_STREAM_STARTED = "Streaming %s"
    VOICE_STREAM_ENDED = "Stream ended in channel %s (error=%s)"
    VOICE_PROCESS_CLEANUP_ERROR = "Error killing yt-dlp process: %s"
    VOICE_SOURCE_CLEANUP_ERROR = "Error cleaning up audio source: %s"
    VOICE_CALLBACK_ERROR = "Status callback failed for channel %s (status=%s)"
