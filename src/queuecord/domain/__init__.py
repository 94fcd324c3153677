"""
Domain Layer

Contains pure playback logic organized by bounded contexts:
- shared/: Exceptions, constrained types and the event bus
- music/: Track records, playback state and engine events
"""

from queuecord.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
