"""
ERC-3668 gateway requests.

Builds the HTTP request for one gateway URL template and extracts the
`data` field of its JSON response.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

import httpx

from ccipread.core.exceptions import GatewayError
from ccipread.core.logging import get_logger

logger = get_logger("erc3668.gateway")

DATA_PLACEHOLDER = "{data}"
SENDER_PLACEHOLDER = "{sender}"

_HEX_RE = re.compile(r"^0x(?:[0-9a-fA-F]{2})*$")


@dataclass(frozen=True)
class GatewayRequest:
    """A fully expanded gateway request."""

    method: str
    url: str
    json: dict[str, Any] | None = None


def build_gateway_request(url_template: str, sender: str, request: bytes) -> GatewayRequest:
    """
    Expand a gateway URL template.

    Templates containing `{data}` are fetched with GET; anything else is a
    POST of `{"sender": ..., "data": ...}`. Placeholders are substituted in
    both cases.
    """
    data_hex = "0x" + request.hex()
    sender_hex = sender.lower()

    url = url_template.replace(DATA_PLACEHOLDER, data_hex).replace(SENDER_PLACEHOLDER, sender_hex)
    if DATA_PLACEHOLDER in url_template:
        return GatewayRequest(method="GET", url=url)
    return GatewayRequest(
        method="POST",
        url=url,
        json={"sender": sender_hex, "data": data_hex},
    )


def parse_gateway_response(payload: Any, url: str) -> bytes:
    """Extract `data` from a decoded gateway response body."""
    if not isinstance(payload, dict):
        raise GatewayError("Gateway response is not a JSON object", url=url)
    data = payload.get("data")
    if not isinstance(data, str) or not _HEX_RE.match(data):
        raise GatewayError(
            "Gateway response has no hex data field",
            url=url,
            details={"data": repr(data)[:80]},
        )
    return bytes.fromhex(data[2:])


async def fetch_gateway(
    client: httpx.AsyncClient,
    url_template: str,
    sender: str,
    request: bytes,
) -> bytes:
    """
    Query one gateway.

    The HTTP status is ignored: only the shape of the body matters. Every
    failure is raised as GatewayError; cancellation is not a failure and
    propagates.
    """
    req = build_gateway_request(url_template, sender, request)
    logger.debug(f"Gateway {req.method} {req.url}")
    try:
        response = await client.request(req.method, req.url, json=req.json)
        payload = response.json()
    except httpx.HTTPError as e:
        raise GatewayError(f"Gateway request failed: {e}", url=req.url) from e
    except ValueError as e:
        raise GatewayError(f"Gateway response is not JSON: {e}", url=req.url) from e
    except Exception as e:
        # Contract-supplied URL or hostile body (invalid port, nesting depth, ...)
        raise GatewayError(f"Gateway failed: {e!r}", url=req.url) from e
    return parse_gateway_response(payload, req.url)


__all__ = [
    "GatewayRequest",
    "build_gateway_request",
    "fetch_gateway",
    "parse_gateway_response",
]
