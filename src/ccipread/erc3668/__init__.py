"""ERC-3668 (CCIP-Read) wire format: revert signals, callback calldata and gateway requests."""

from ccipread.erc3668.abi import (
    OFFCHAIN_LOOKUP_SELECTOR,
    OFFCHAIN_TRY_NEXT_SELECTOR,
    UNANSWERED,
    decode_failure,
    encode_callback,
    encode_offchain_lookup,
    encode_offchain_try_next,
    parse_signal,
)
from ccipread.erc3668.gateway import GatewayRequest, build_gateway_request, fetch_gateway

__all__ = [
    "OFFCHAIN_LOOKUP_SELECTOR",
    "OFFCHAIN_TRY_NEXT_SELECTOR",
    "UNANSWERED",
    "GatewayRequest",
    "build_gateway_request",
    "decode_failure",
    "encode_callback",
    "encode_offchain_lookup",
    "encode_offchain_try_next",
    "fetch_gateway",
    "parse_signal",
]
