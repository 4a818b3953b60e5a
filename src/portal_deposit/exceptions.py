"""Exception hierarchy for the portal deposit flow."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .types import TransactionRequest


class DepositFlowError(Exception):
    """Base exception for all deposit flow errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NetworkError(DepositFlowError):
    """Raised when the node cannot be reached or rejects an RPC call."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


class ValidationError(DepositFlowError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class SigningError(DepositFlowError):
    """Raised when a transaction cannot be signed locally."""

    def __init__(
        self,
        message: str,
        request: TransactionRequest | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.request = request


class SubmissionError(DepositFlowError):
    """Raised when the node refuses a signed transaction."""

    def __init__(
        self,
        message: str,
        request: TransactionRequest | None = None,
        tx_hash: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.request = request
        self.tx_hash = tx_hash


class FlowCancelledError(DepositFlowError):
    """Raised when the flow's cancel event is set between two steps."""


class PollCancelledError(FlowCancelledError):
    """Raised when a poll loop is stopped through its cancel event."""
