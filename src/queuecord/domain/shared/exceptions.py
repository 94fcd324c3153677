"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class InvalidArgumentError(DomainError):
    """Raised when an operation receives an argument outside its valid range."""

    def __init__(self, argument: str, message: str | None = None) -> None:
        msg = message or f"Invalid value for '{argument}'"
        super().__init__(msg, code="INVALID_ARGUMENT")
        self.argument = argument


class NotAvailableError(DomainError):
    """Raised when a requested resource does not exist yet (e.g. empty history)."""

    def __init__(self, resource: str, message: str | None = None) -> None:
        msg = message or f"{resource} is not available"
        super().__init__(msg, code="NOT_AVAILABLE")
        self.resource = resource


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


class ProviderError(DomainError):
    """Raised when track metadata could not be fetched (network, not found, parse)."""

    def __init__(self, locator: str, message: str | None = None) -> None:
        msg = message or f"Could not fetch metadata for '{locator}'"
        super().__init__(msg, code="PROVIDER_ERROR")
        self.locator = locator


class SinkError(DomainError):
    """Raised when the audio output sink fails to connect or stream."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        super().__init__(message, code="SINK_ERROR")
        self.operation = operation
