"""
ERC-3668 revert signals.

Classifies call failures into `OffchainLookup(...)` / `OffchainTryNext(...)`
signals and builds the callback calldata.

Reference: https://eips.ethereum.org/EIPS/eip-3668
"""

from __future__ import annotations

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import DecodingError
from eth_utils import keccak, to_checksum_address

from ccipread.core.exceptions import CallException
from ccipread.core.logging import get_logger
from ccipread.core.types import OffchainLookup, OffchainTryNext, Outcome

logger = get_logger("erc3668.abi")


# ───────────────────────────────────────────────────────────────────
# Signatures & Selectors
# ───────────────────────────────────────────────────────────────────

SELECTOR_LENGTH = 4

OFFCHAIN_LOOKUP_SIGNATURE = "OffchainLookup(address,string[],bytes,bytes4,bytes)"
OFFCHAIN_TRY_NEXT_SIGNATURE = "OffchainTryNext(address)"
OFFCHAIN_LOOKUP_UNANSWERED_SIGNATURE = "OffchainLookupUnanswered()"

OFFCHAIN_LOOKUP_TYPES = ["address", "string[]", "bytes", "bytes4", "bytes"]
OFFCHAIN_TRY_NEXT_TYPES = ["address"]
CALLBACK_TYPES = ["bytes", "bytes"]


def selector(signature: str) -> bytes:
    """First 4 bytes of keccak256(signature)."""
    return keccak(text=signature)[:SELECTOR_LENGTH]


OFFCHAIN_LOOKUP_SELECTOR = selector(OFFCHAIN_LOOKUP_SIGNATURE)
OFFCHAIN_TRY_NEXT_SELECTOR = selector(OFFCHAIN_TRY_NEXT_SIGNATURE)

# Callback response meaning "no gateway answered"; a gateway may not forge it
UNANSWERED = selector(OFFCHAIN_LOOKUP_UNANSWERED_SIGNATURE)


# ───────────────────────────────────────────────────────────────────
# Decoding
# ───────────────────────────────────────────────────────────────────

def parse_signal(data: bytes | None) -> OffchainLookup | OffchainTryNext | None:
    """
    Parse revert data as one of the two ERC-3668 signals.

    Returns None when the data is too short, has an unknown selector, or
    does not decode.
    """
    if not data or len(data) < SELECTOR_LENGTH:
        return None

    head, body = data[:SELECTOR_LENGTH], data[SELECTOR_LENGTH:]
    try:
        if head == OFFCHAIN_LOOKUP_SELECTOR:
            sender, urls, request, callback, carry = abi_decode(OFFCHAIN_LOOKUP_TYPES, body)
            return OffchainLookup(
                sender=to_checksum_address(sender),
                urls=tuple(urls),
                request=bytes(request),
                callback=bytes(callback),
                carry=bytes(carry),
            )
        if head == OFFCHAIN_TRY_NEXT_SELECTOR:
            (sender,) = abi_decode(OFFCHAIN_TRY_NEXT_TYPES, body)
            return OffchainTryNext(sender=to_checksum_address(sender))
    except (DecodingError, ValueError) as e:
        logger.debug(f"Revert data matched selector 0x{head.hex()} but failed to decode: {e}")
    return None


def decode_failure(failure: BaseException) -> Outcome:
    """
    Translate a failed call into an ERC-3668 signal.

    Anything that is not a recognised signal re-raises `failure` unchanged.
    """
    if not isinstance(failure, CallException):
        raise failure
    signal = parse_signal(failure.data)
    if signal is None:
        raise failure
    return signal


# ───────────────────────────────────────────────────────────────────
# Encoding
# ───────────────────────────────────────────────────────────────────

def encode_callback(lookup: OffchainLookup, response: bytes) -> bytes:
    """Calldata for `callback(bytes response, bytes extraData)`."""
    return lookup.callback + abi_encode(CALLBACK_TYPES, [response, lookup.carry])


def encode_offchain_lookup(
    sender: str,
    urls: list[str] | tuple[str, ...],
    request: bytes,
    callback: bytes,
    carry: bytes = b"",
) -> bytes:
    """Revert data for `OffchainLookup(...)`, as a contract would emit it."""
    return OFFCHAIN_LOOKUP_SELECTOR + abi_encode(
        OFFCHAIN_LOOKUP_TYPES,
        [to_checksum_address(sender), list(urls), request, callback, carry],
    )


def encode_offchain_try_next(sender: str) -> bytes:
    """Revert data for `OffchainTryNext(address)`."""
    return OFFCHAIN_TRY_NEXT_SELECTOR + abi_encode(
        OFFCHAIN_TRY_NEXT_TYPES, [to_checksum_address(sender)]
    )


__all__ = [
    "CALLBACK_TYPES",
    "OFFCHAIN_LOOKUP_SELECTOR",
    "OFFCHAIN_TRY_NEXT_SELECTOR",
    "UNANSWERED",
    "decode_failure",
    "encode_callback",
    "encode_offchain_lookup",
    "encode_offchain_try_next",
    "parse_signal",
    "selector",
]
