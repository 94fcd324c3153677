"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the queue engine
and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from queuecord.application.interfaces.audio_sink import (
    AudioSink,
    ConnectionHandle,
    StatusCallback,
    StreamId,
)
from queuecord.application.interfaces.metadata_provider import MetadataProvider

__all__ = [
    "AudioSink",
    "ConnectionHandle",
    "MetadataProvider",
    "StatusCallback",
    "StreamId",
]
