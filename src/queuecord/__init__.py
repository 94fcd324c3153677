"""QueueCord: per-guild music queue engine for Discord voice channels."""

from queuecord.application.services.engine_registry import EngineRegistry
from queuecord.application.services.queue_engine import QueueEngine

__version__ = "0.1.0"

__all__ = [
    "EngineRegistry",
    "QueueEngine",
    "__version__",
]
