"""
ccipread - client-side ERC-3668 (CCIP-Read) for Python.

Usage:
    >>> from ccipread import CCIPReadRunner, JsonRpcRunner, TransactionRequest
    >>>
    >>> async with CCIPReadRunner(JsonRpcRunner("https://...")) as runner:
    ...     result = await runner.call(
    ...         TransactionRequest(to="0x...", data=calldata, enable_ccip_read=True)
    ...     )
"""

from ccipread.core.config import Config
from ccipread.core.exceptions import (
    CallException,
    CCIPReadError,
    ConfigurationError,
    GatewayError,
    MaxAttemptsError,
    NetworkError,
    OffchainLookupError,
    ProtocolContradictionError,
    SenderMismatchError,
    ValidationError,
)
from ccipread.core.logging import configure_logging, get_logger
from ccipread.core.types import (
    LookupState,
    OffchainLookup,
    OffchainTryNext,
    Outcome,
    TransactionRequest,
)
from ccipread.erc3668 import UNANSWERED
from ccipread.providers import CallRunner, JsonRpcRunner
from ccipread.runner import CCIPReadRunner

__version__ = "0.1.0"

__all__ = [
    "CCIPReadRunner",
    "CallRunner",
    "JsonRpcRunner",
    "Config",
    "TransactionRequest",
    "OffchainLookup",
    "OffchainTryNext",
    "LookupState",
    "Outcome",
    "UNANSWERED",
    "CCIPReadError",
    "CallException",
    "ConfigurationError",
    "GatewayError",
    "MaxAttemptsError",
    "NetworkError",
    "OffchainLookupError",
    "ProtocolContradictionError",
    "SenderMismatchError",
    "ValidationError",
    "configure_logging",
    "get_logger",
]
