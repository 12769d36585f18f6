"""Call primitives the CCIP-Read runner can wrap."""

from ccipread.providers.base import AddressResolver, CallRunner
from ccipread.providers.rpc import RPC_ENV_VAR, JsonRpcRunner, canonical_address

__all__ = [
    "AddressResolver",
    "CallRunner",
    "JsonRpcRunner",
    "RPC_ENV_VAR",
    "canonical_address",
]
