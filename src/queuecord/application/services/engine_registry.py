"""Engine Registry

Holds one :class:`QueueEngine` per guild. Engines are created lazily on first
access and torn down on removal.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from queuecord.application.services.queue_engine import QueueEngine
from queuecord.config.settings import QueueSettings
from queuecord.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from queuecord.application.interfaces.audio_sink import AudioSink
    from queuecord.application.interfaces.metadata_provider import MetadataProvider

logger = logging.getLogger(__name__)


class EngineRegistry:
    """In-memory map of guild id to queue engine.

    The metadata provider is shared by every engine; each engine gets its own
    sink from ``sink_factory`` since a sink holds exactly one voice connection.
    """

    def __init__(
        self,
        provider: MetadataProvider,
        sink_factory: Callable[[int], AudioSink],
        settings: QueueSettings | None = None,
    ) -> None:
        self._provider = provider
        self._sink_factory = sink_factory
        self._settings = settings or QueueSettings()
        self._engines: dict[int, QueueEngine] = {}

    def __len__(self) -> int:
        return len(self._engines)

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._engines

    def get(self, guild_id: int) -> QueueEngine | None:
        return self._engines.get(guild_id)

    def get_or_create(self, guild_id: int) -> QueueEngine:
        engine = self._engines.get(guild_id)
        if engine is None:
            engine = QueueEngine(
                provider=self._provider,
                sink=self._sink_factory(guild_id),
                settings=self._settings,
            )
            self._engines[guild_id] = engine
            logger.info(LogTemplates.REGISTRY_CREATED, guild_id)
        return engine

    async def remove(self, guild_id: int) -> bool:
        """Close and forget the guild's engine. Returns False if there was none."""
        engine = self._engines.pop(guild_id, None)
        if engine is None:
            return False

        await engine.close()
        logger.info(LogTemplates.REGISTRY_REMOVED, guild_id)
        return True

    async def close_all(self) -> int:
        """Close every engine. Returns the number closed."""
        guild_ids = list(self._engines)
        for guild_id in guild_ids:
            await self.remove(guild_id)
        return len(guild_ids)
