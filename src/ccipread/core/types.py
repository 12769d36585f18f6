"""
Core data types for ccipread.

Requests handed to a call primitive, the two ERC-3668 revert signals, and
the state record the resolution loop threads through each attempt.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Union


@dataclass(frozen=True)
class TransactionRequest:
    """A read-only call to a contract."""

    to: str | None = None
    data: bytes = b""
    from_address: str | None = None
    block: str = "latest"
    enable_ccip_read: bool = False

    def with_updates(self, **updates: Any) -> TransactionRequest:
        """Create a new request with updated values."""
        return replace(self, **updates)

    def to_rpc_dict(self) -> dict[str, Any]:
        """Convert to the eth_call transaction object."""
        payload: dict[str, Any] = {"data": "0x" + self.data.hex()}
        if self.to:
            payload["to"] = self.to
        if self.from_address:
            payload["from"] = self.from_address
        return payload


@dataclass(frozen=True)
class OffchainTryNext:
    """
    Decoded `OffchainTryNext(address sender)` revert.

    Tells the runner to retry the callback with the next URL of the lookup
    already in progress.
    """

    sender: str


@dataclass(frozen=True)
class OffchainLookup:
    """
    Decoded `OffchainLookup(address,string[],bytes,bytes4,bytes)` revert.

    `carry` is the contract's extraData: passed back to the callback
    untouched.
    """

    sender: str
    urls: tuple[str, ...]
    request: bytes
    callback: bytes
    carry: bytes


# A call either answers (bytes) or reverts with one of the two signals
Outcome = Union[bytes, OffchainLookup, OffchainTryNext]


@dataclass
class LookupState:
    """
    Mutable state of one resolution.

    `remaining` is shared across every lookup the contract issues; replacing
    the lookup resets only the URL cursor.
    """

    lookup: OffchainLookup
    remaining: int
    index: int = 0
    history: list[str] = field(default_factory=list)

    def has_next_url(self) -> bool:
        return self.index < len(self.lookup.urls)

    def next_url(self) -> str:
        url = self.lookup.urls[self.index]
        self.index += 1
        self.history.append(url)
        return url

    def replace(self, lookup: OffchainLookup) -> None:
        self.lookup = lookup
        self.index = 0

    def consume_attempt(self) -> bool:
        """Take one attempt from the budget. Returns False once it is spent."""
        if self.remaining <= 0:
            return False
        self.remaining -= 1
        return True
