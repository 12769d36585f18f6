"""
CCIP-Read runner.

Wraps a call primitive and performs the ERC-3668 offchain lookup cycle:
call, fetch from a gateway, call back, repeat until the contract answers.

Usage:
    >>> from ccipread import CCIPReadRunner, JsonRpcRunner, TransactionRequest
    >>>
    >>> runner = CCIPReadRunner(JsonRpcRunner("https://..."))
    >>> result = await runner.call(
    ...     TransactionRequest(to="0x...", data=calldata, enable_ccip_read=True)
    ... )
"""

from __future__ import annotations

from typing import Any

import httpx

from ccipread.core.config import Config
from ccipread.core.exceptions import (
    CallException,
    GatewayError,
    MaxAttemptsError,
    ProtocolContradictionError,
    SenderMismatchError,
)
from ccipread.core.logging import get_logger
from ccipread.core.types import (
    LookupState,
    OffchainLookup,
    OffchainTryNext,
    Outcome,
    TransactionRequest,
)
from ccipread.erc3668.abi import UNANSWERED, decode_failure, encode_callback
from ccipread.erc3668.gateway import fetch_gateway
from ccipread.providers.base import AddressResolver, CallRunner
from ccipread.providers.rpc import canonical_address

logger = get_logger("runner")


class CCIPReadRunner:
    """
    Call primitive with client-side CCIP-Read.

    Requests without `enable_ccip_read` are forwarded untouched. Otherwise
    the runner owns the whole lookup: the wrapped primitive is always called
    with CCIP-Read disabled.

    One attempt budget (`max_attempts`) is shared by every lookup the
    contract issues during a call, so a contract that keeps reverting with
    fresh lookups cannot make the runner loop forever.
    """

    def __init__(
        self,
        runner: CallRunner,
        max_attempts: int | None = None,
        http_client: httpx.AsyncClient | None = None,
        config: Config | None = None,
    ) -> None:
        """
        Args:
            runner: The underlying call primitive
            max_attempts: Total callback rounds per call (default 20)
            http_client: Shared httpx client for gateway fetches
            config: Runner configuration; `max_attempts` overrides it
        """
        config = config or Config()
        if max_attempts is not None:
            config = config.with_updates(max_attempts=max_attempts)
        self.runner = runner
        self.config = config
        self._http_client = http_client
        self._owns_client = False

    @property
    def max_attempts(self) -> int:
        return self.config.max_attempts

    @property
    def provider(self) -> Any:
        """Provider of the wrapped runner, if it exposes one."""
        return getattr(self.runner, "provider", None)

    async def _get_client(self) -> httpx.AsyncClient:
        """Lazy-init HTTP client for gateway fetches."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.config.gateway_timeout)
            self._owns_client = True
        return self._http_client

    async def close(self) -> None:
        """Close owned HTTP client."""
        if self._owns_client and self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> CCIPReadRunner:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ─── Resolution ──────────────────────────────────────────────────

    async def call(self, tx: TransactionRequest) -> bytes:
        """
        Execute a read call, following offchain lookups.

        Raises:
            SenderMismatchError: a lookup came from a contract other than `tx.to`
            ProtocolContradictionError: the contract sent a signal out of turn
            MaxAttemptsError: the attempt budget ran out
            CallException: any revert that is not an ERC-3668 signal
        """
        if not tx.to or not tx.enable_ccip_read:
            return await self.runner.call(tx)

        origin = await self._resolve_origin(tx.to)
        outcome = await self._call(tx.with_updates(to=origin, enable_ccip_read=False))
        if isinstance(outcome, bytes):
            return outcome
        if isinstance(outcome, OffchainTryNext):
            logger.error(f"{origin} reverted OffchainTryNext() before any OffchainLookup()")
            raise ProtocolContradictionError(
                "OffchainTryNext() without a pending OffchainLookup()",
                details={"origin": origin},
            )
        self._check_sender(origin, outcome)

        state = LookupState(lookup=outcome, remaining=self.max_attempts)
        client = await self._get_client()

        while state.consume_attempt():
            logger.debug(
                f"ccip read {origin}: attempt {self.max_attempts - state.remaining}/{self.max_attempts}, "
                f"url {state.index + 1}/{len(state.lookup.urls)}"
            )
            if state.has_next_url():
                url = state.next_url()
                try:
                    response = await fetch_gateway(client, url, origin, state.lookup.request)
                except GatewayError as e:
                    logger.warning(f"Gateway failed, trying next: {e}")
                    continue
                if response == UNANSWERED:
                    logger.warning(f"Gateway returned the reserved unanswered value, trying next: {url}")
                    continue
            else:
                response = UNANSWERED

            outcome = await self._call(
                TransactionRequest(
                    to=origin,
                    data=encode_callback(state.lookup, response),
                    block=tx.block,
                )
            )
            if isinstance(outcome, bytes):
                return outcome
            if response == UNANSWERED and not isinstance(outcome, OffchainLookup):
                logger.error(f"{origin} answered OffchainLookupUnanswered() with OffchainTryNext()")
                raise ProtocolContradictionError(
                    "OffchainTryNext() after OffchainLookupUnanswered()",
                    details={"origin": origin},
                )
            self._check_sender(origin, outcome)
            if isinstance(outcome, OffchainLookup):
                logger.debug(f"ccip read {origin}: new OffchainLookup() with {len(outcome.urls)} url(s)")
                state.replace(outcome)

        logger.error(f"ccip read {origin}: max attempts ({self.max_attempts}) exhausted")
        raise MaxAttemptsError(self.max_attempts, details={"origin": origin, "urls": state.history})

    async def _call(self, tx: TransactionRequest) -> Outcome:
        """Call through the primitive, turning ERC-3668 reverts into signals."""
        try:
            return await self.runner.call(tx)
        except CallException as err:
            return decode_failure(err)

    async def _resolve_origin(self, target: str) -> str:
        if isinstance(self.runner, AddressResolver):
            return await self.runner.resolve_address(target)
        return canonical_address(target)

    @staticmethod
    def _check_sender(origin: str, signal: OffchainLookup | OffchainTryNext) -> None:
        if signal.sender.lower() != origin.lower():
            logger.error(f"Rejected signal from {signal.sender}: call target is {origin}")
            raise SenderMismatchError(origin, signal.sender)


__all__ = [
    "CCIPReadRunner",
]
