"""
Call primitive interface.

CCIPReadRunner wraps any object implementing CallRunner: a JSON-RPC node
client, a local EVM, or a test double.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ccipread.core.types import TransactionRequest


@runtime_checkable
class CallRunner(Protocol):
    """
    Executes a read-only call.

    Implementations raise CallException (with the revert payload in `data`
    when available) when the contract reverts.
    """

    async def call(self, tx: TransactionRequest) -> bytes:
        ...


@runtime_checkable
class AddressResolver(Protocol):
    """Optional capability: canonicalise a call target before the loop starts."""

    async def resolve_address(self, target: str) -> str:
        ...
