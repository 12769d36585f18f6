"""
JSON-RPC call primitive — `eth_call` over httpx.

Configuration (pick one):
    1. Constructor: JsonRpcRunner(rpc_url="https://eth-mainnet.g.alchemy.com/v2/KEY")
    2. Env var:     CCIPREAD_RPC_URL=https://eth-mainnet.g.alchemy.com/v2/KEY

For fallback, pass comma-separated URLs:
    CCIPREAD_RPC_URL=https://alchemy.com/v2/KEY,https://infura.io/v3/KEY
"""

from __future__ import annotations

import os
from typing import Any

import httpx
from eth_utils import is_address, to_checksum_address

from ccipread.core.exceptions import (
    CallException,
    ConfigurationError,
    NetworkError,
    ValidationError,
)
from ccipread.core.logging import get_logger
from ccipread.core.types import TransactionRequest
from ccipread.resilience.retry import execute_with_retry

logger = get_logger("providers.rpc")

# Environment variable for the RPC endpoint
RPC_ENV_VAR = "CCIPREAD_RPC_URL"


def canonical_address(target: str) -> str:
    """Checksum a hex address; names are not resolved."""
    if not isinstance(target, str) or not is_address(target):
        raise ValidationError(f"Not a contract address: {target!r}")
    return to_checksum_address(target)


def _parse_hex(value: Any, field: str) -> bytes:
    if not isinstance(value, str) or not value.startswith("0x") or len(value) % 2:
        raise ValueError(f"{field} is not 0x-prefixed hex: {value!r}")
    return bytes.fromhex(value[2:])


def _extract_revert_data(error: dict[str, Any]) -> bytes | None:
    """Pull revert bytes out of a JSON-RPC error object, across node flavours."""
    data = error.get("data")
    if isinstance(data, dict):
        data = data.get("data") or data.get("result")
    if not isinstance(data, str):
        return None
    # Some nodes prefix the payload with a description
    if not data.startswith("0x") and "0x" in data:
        data = data[data.index("0x"):]
    try:
        return _parse_hex(data, "error.data")
    except ValueError:
        return None


class JsonRpcRunner:
    """
    Call primitive backed by a JSON-RPC node.

    Supports multi-provider fallback: if the primary RPC fails at the
    transport level, the next URL in the list is tried. A revert is an
    answer, not a transport failure, and is raised immediately as
    CallException.

    Usage:
        rpc = JsonRpcRunner(rpc_url="https://eth-mainnet.g.alchemy.com/v2/KEY")
        runner = CCIPReadRunner(rpc)
        result = await runner.call(TransactionRequest(to=..., data=..., enable_ccip_read=True))
    """

    RPC_TIMEOUT = 10.0  # seconds per JSON-RPC call

    def __init__(
        self,
        rpc_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
        retry_attempts: int = 3,
        retry_wait: float = 0.5,
    ) -> None:
        """
        Args:
            rpc_url: RPC endpoint URL(s). Supports comma-separated for
                     multi-provider fallback. Falls back to CCIPREAD_RPC_URL env var.
            http_client: Shared httpx client (for connection pooling).
            timeout: Per-request timeout for an owned client.
            retry_attempts: Sweeps over all URLs before giving up on transient errors.
            retry_wait: Base backoff between sweeps, in seconds.
        """
        raw_url = rpc_url or os.environ.get(RPC_ENV_VAR, "")
        self._rpc_urls: list[str] = [u.strip() for u in raw_url.split(",") if u.strip()]
        if not self._rpc_urls:
            raise ConfigurationError(
                f"No RPC URL configured. Set {RPC_ENV_VAR} env var or pass rpc_url to JsonRpcRunner."
            )
        self._http_client = http_client
        self._owns_client = False
        self._timeout = timeout or self.RPC_TIMEOUT
        self._retry_attempts = retry_attempts
        self._retry_wait = retry_wait
        self._request_id = 0

    @property
    def rpc_urls(self) -> list[str]:
        return list(self._rpc_urls)

    async def _get_client(self) -> httpx.AsyncClient:
        """Lazy-init HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True
        return self._http_client

    async def close(self) -> None:
        """Close owned HTTP client."""
        if self._owns_client and self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def resolve_address(self, target: str) -> str:
        return canonical_address(target)

    async def call(self, tx: TransactionRequest) -> bytes:
        """Execute eth_call, retrying transient transport failures."""
        return await execute_with_retry(
            self._eth_call,
            tx,
            attempts=self._retry_attempts,
            wait_min=self._retry_wait,
        )

    async def _eth_call(self, tx: TransactionRequest) -> bytes:
        """
        One sweep over the configured providers.

        Raises:
            CallException: the contract reverted (or the node rejected the call)
            NetworkError: every provider failed at the transport level
        """
        client = await self._get_client()
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "method": "eth_call",
            "params": [tx.to_rpc_dict(), tx.block],
            "id": self._request_id,
        }

        last_error = NetworkError("No RPC provider answered")
        for i, rpc_url in enumerate(self._rpc_urls):
            position = f"{i + 1}/{len(self._rpc_urls)}"
            try:
                response = await client.post(rpc_url, json=payload)
                response.raise_for_status()
                result = response.json()
            except httpx.TimeoutException:
                logger.warning(f"RPC timeout from provider {position}: {rpc_url}")
                last_error = NetworkError(f"RPC timeout: {rpc_url}", url=rpc_url)
                continue
            except httpx.HTTPStatusError as e:
                logger.warning(f"RPC HTTP {e.response.status_code} from provider {position}: {rpc_url}")
                last_error = NetworkError(
                    f"RPC HTTP {e.response.status_code}",
                    status_code=e.response.status_code,
                    url=rpc_url,
                )
                continue
            except httpx.HTTPError as e:
                logger.warning(f"RPC connection error from provider {position}: {e}")
                last_error = NetworkError(f"RPC connection error: {e}", url=rpc_url)
                continue
            except ValueError as e:
                logger.warning(f"RPC returned invalid JSON from provider {position}: {e}")
                last_error = NetworkError(f"RPC returned invalid JSON: {e}", url=rpc_url)
                continue

            if not isinstance(result, dict):
                last_error = NetworkError("RPC response is not an object", url=rpc_url)
                continue

            if "error" in result:
                error = result["error"] if isinstance(result["error"], dict) else {"message": str(result["error"])}
                raise CallException(
                    error.get("message") or "execution reverted",
                    data=_extract_revert_data(error),
                    tx=tx,
                    details={"code": error.get("code")},
                )

            try:
                return _parse_hex(result.get("result"), "result")
            except ValueError as e:
                last_error = NetworkError(str(e), url=rpc_url)
                continue

        logger.error(f"All {len(self._rpc_urls)} RPC providers failed: {last_error}")
        raise last_error


__all__ = [
    "JsonRpcRunner",
    "RPC_ENV_VAR",
    "canonical_address",
]
