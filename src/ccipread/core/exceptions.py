"""
Exception hierarchy for ccipread.

All package-specific exceptions inherit from CCIPReadError for easy catching.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ccipread.core.types import TransactionRequest


class CCIPReadError(Exception):
    """
    Base exception for all ccipread errors.

    Example:
        >>> try:
        ...     await runner.call(tx)
        ... except CCIPReadError as e:
        ...     print(f"Offchain lookup failed: {e}")
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(CCIPReadError):
    """
    Configuration is missing or invalid.

    Raised when:
    - Configuration values fail validation
    - Environment variables hold malformed values
    """

    pass


class ValidationError(CCIPReadError):
    """
    Input validation error.

    Raised when:
    - A call target is not a valid address
    - Hex input cannot be decoded
    """

    pass


class CallException(CCIPReadError):
    """
    The remote procedure rejected the call.

    This is the structured failure of the underlying call primitive. `data`
    holds the raw revert payload when the node returned one.
    """

    def __init__(
        self,
        message: str,
        data: bytes | None = None,
        tx: TransactionRequest | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.data = data
        self.tx = tx

    def __str__(self) -> str:
        if self.data:
            return f"{self.message} (data: 0x{self.data.hex()})"
        return self.message


class NetworkError(CCIPReadError):
    """
    Network or JSON-RPC transport error.

    Raised when:
    - HTTP request fails (timeout, connection error)
    - RPC returns a malformed response
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code
        self.url = url

    def is_rate_limited(self) -> bool:
        """Check if this is a rate limit error."""
        return self.status_code == 429

    def is_server_error(self) -> bool:
        """Check if this is a server-side error."""
        return self.status_code is not None and 500 <= self.status_code < 600


class GatewayError(CCIPReadError):
    """
    A single offchain gateway did not produce usable data.

    Absorbed by the resolution loop, which moves on to the next URL.
    """

    def __init__(
        self,
        message: str,
        url: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.url = url

    def __str__(self) -> str:
        return f"{self.message} (URL: {self.url})"


class OffchainLookupError(CCIPReadError):
    """
    Fatal ERC-3668 protocol failure.

    None of the subclasses are retried by the runner; re-invoke the call
    with fresh state to try again.
    """

    pass


class SenderMismatchError(OffchainLookupError):
    """OffchainLookup sender differs from the contract that was called."""

    def __init__(
        self,
        origin: str,
        sender: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__("origin != sender", details)
        self.origin = origin
        self.sender = sender

    def __str__(self) -> str:
        return f"{self.message} (origin: {self.origin}, sender: {self.sender})"


class ProtocolContradictionError(OffchainLookupError):
    """
    The contract answered with a signal that makes no sense at this point.

    Raised when:
    - OffchainTryNext() is reverted before any OffchainLookup() exists
    - The callback got OffchainLookupUnanswered() and did not issue a new lookup
    """

    def __init__(
        self,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"ccip read: {reason}", details)
        self.reason = reason


class MaxAttemptsError(OffchainLookupError):
    """The shared attempt budget ran out before the contract answered."""

    def __init__(
        self,
        max_attempts: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"ccip read: max attempts ({max_attempts})", details)
        self.max_attempts = max_attempts
