"""
Shared fixtures: in-memory contracts and an httpx mock gateway.

Contracts are plain Python objects that answer calldata by selector and
revert by raising CallException, the same way a node reports a revert.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

import httpx
import pytest
from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode

from ccipread.core.exceptions import CallException
from ccipread.core.logging import get_logger
from ccipread.core.types import TransactionRequest
from ccipread.erc3668.abi import (
    UNANSWERED,
    encode_offchain_lookup,
    encode_offchain_try_next,
    selector,
)

ORIGIN = "0x1111111111111111111111111111111111111111"
IMPOSTOR = "0x2222222222222222222222222222222222222222"
GATEWAY = "https://gateway.test"

REQUEST_SELECTOR = selector("request()")
CALLBACK_SELECTOR = selector("callback(bytes,bytes)")
ERROR_STRING_SELECTOR = selector("Error(string)")


def encode_string(value: str) -> bytes:
    return abi_encode(["string"], [value])


def revert(data: bytes) -> CallException:
    return CallException("execution reverted", data=data)


def require_failed(reason: str) -> CallException:
    return revert(ERROR_STRING_SELECTOR + encode_string(reason))


def lookup_revert(
    urls: list[str],
    sender: str = ORIGIN,
    request: bytes = b"",
    carry: bytes = b"",
) -> CallException:
    return revert(encode_offchain_lookup(sender, urls, request, CALLBACK_SELECTOR, carry))


def decode_callback(data: bytes) -> tuple[bytes, bytes]:
    assert data[:4] == CALLBACK_SELECTOR
    response, carry = abi_decode(["bytes", "bytes"], data[4:])
    return response, carry


class Contract:
    """Dispatches calldata to `request` / `callback` handlers."""

    def __init__(self, address: str = ORIGIN) -> None:
        self.address = address

    def request(self) -> bytes:
        raise NotImplementedError

    def callback(self, response: bytes, carry: bytes) -> bytes:
        raise NotImplementedError

    def handle(self, data: bytes) -> bytes:
        if data[:4] == REQUEST_SELECTOR:
            return self.request()
        if data[:4] == CALLBACK_SELECTOR:
            return self.callback(*decode_callback(data))
        raise revert(b"")


class UnansweredContract(Contract):
    """Lookup with no URLs; the callback only accepts OffchainLookupUnanswered()."""

    def request(self) -> bytes:
        raise lookup_revert([])

    def callback(self, response: bytes, carry: bytes) -> bytes:
        if response[:4] != UNANSWERED:
            raise require_failed("expected unanswered")
        return encode_string("chonk")


class TryNextContract(Contract):
    """Accepts only a gateway answer of "chonk"; anything else is OffchainTryNext()."""

    def __init__(self, urls: list[str], address: str = ORIGIN) -> None:
        super().__init__(address)
        self.urls = urls

    def request(self) -> bytes:
        raise lookup_revert(self.urls, request=b"\xab\xcd", carry=b"CHONK")

    def callback(self, response: bytes, carry: bytes) -> bytes:
        try:
            (answer,) = abi_decode(["string"], response)
        except Exception:
            answer = None
        if answer == "chonk":
            return encode_string(carry.decode())
        raise revert(encode_offchain_try_next(self.address))


class ScriptedContract(Contract):
    """`request` and every `callback` replay a fixed script of outcomes."""

    def __init__(self, first: Any, *callbacks: Any, address: str = ORIGIN) -> None:
        super().__init__(address)
        self.first = first
        self.script = list(callbacks)
        self.responses: list[bytes] = []

    @staticmethod
    def _play(step: Any) -> bytes:
        if isinstance(step, BaseException):
            raise step
        return step

    def request(self) -> bytes:
        return self._play(self.first)

    def callback(self, response: bytes, carry: bytes) -> bytes:
        self.responses.append(response)
        step = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        return self._play(step)


class FakeChain:
    """CallRunner over a set of in-memory contracts."""

    def __init__(self, *contracts: Contract) -> None:
        self.contracts = {c.address.lower(): c for c in contracts}
        self.calls: list[TransactionRequest] = []

    async def call(self, tx: TransactionRequest) -> bytes:
        self.calls.append(tx)
        contract = self.contracts.get((tx.to or "").lower())
        if contract is None:
            return b""
        return contract.handle(tx.data)


class GatewayLog:
    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    @property
    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


def default_gateway(request: httpx.Request) -> httpx.Response:
    """Mirrors the reference gateway: /<status>, /malicious, /wrong, /unanswered, /html, /deep, else "chonk"."""
    path = request.url.path
    if path.strip("/").isdigit():
        return httpx.Response(int(path.strip("/")), json={"message": "error"})
    if path == "/malicious":
        return httpx.Response(200, json={"data": "0x12345"})
    if path == "/wrong":
        return httpx.Response(200, json={"data": "0x" + encode_string("not chonk").hex()})
    if path == "/unanswered":
        return httpx.Response(200, json={"data": "0x" + UNANSWERED.hex()})
    if path == "/html":
        return httpx.Response(200, text="<html>nope</html>")
    if path == "/deep":
        return httpx.Response(
            200,
            content=b"[" * 100000 + b"]" * 100000,
            headers={"content-type": "application/json"},
        )
    return httpx.Response(200, json={"data": "0x" + encode_string("chonk").hex()})


@pytest.fixture
def gateway_log() -> GatewayLog:
    return GatewayLog()


@pytest.fixture
def make_http_client(gateway_log: GatewayLog) -> Callable[..., httpx.AsyncClient]:
    def factory(handler: Callable[[httpx.Request], httpx.Response] = default_gateway) -> httpx.AsyncClient:
        def logged(request: httpx.Request) -> httpx.Response:
            gateway_log.requests.append(request)
            return handler(request)

        return httpx.AsyncClient(transport=httpx.MockTransport(logged))

    return factory


@pytest.fixture
def http_client(make_http_client: Callable[..., httpx.AsyncClient]) -> httpx.AsyncClient:
    return make_http_client()


@pytest.fixture(autouse=True)
def reset_logging():
    """configure_logging() detaches the package logger from caplog; undo it."""
    yield
    logger = get_logger()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
