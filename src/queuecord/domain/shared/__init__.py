"""
Shared Domain Kernel

Contains exceptions, constrained types and the event bus shared by the
music domain and the adapters.
"""

from queuecord.domain.shared.events import DomainEvent, EventBus
from queuecord.domain.shared.exceptions import (
    DomainError,
    InvalidArgumentError,
    InvalidOperationError,
    NotAvailableError,
    ProviderError,
    SinkError,
)

__all__ = [
    "DomainEvent",
    "EventBus",
    "DomainError",
    "InvalidArgumentError",
    "InvalidOperationError",
    "NotAvailableError",
    "ProviderError",
    "SinkError",
]
