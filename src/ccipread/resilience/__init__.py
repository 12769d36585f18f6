"""
Resilience layer for ccipread.

Provides retry policies for the JSON-RPC call primitive.
"""

from .retry import execute_with_retry, is_transient_error

__all__ = [
    "execute_with_retry",
    "is_transient_error",
]
