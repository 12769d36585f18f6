"""
Configuration management for ccipread.

Handles loading configuration from environment variables and validation.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any

from ccipread.core.exceptions import ConfigurationError

DEFAULT_MAX_ATTEMPTS = 20


def _get_env_var(name: str, default: str | None = None, required: bool = False) -> str | None:
    """Get environment variable with optional default."""
    value = os.environ.get(name, default)
    if required and not value:
        raise ConfigurationError(f"Required environment variable {name} is not set")
    return value


def _parse_number(name: str, raw: str | None, cast: type) -> Any:
    if raw is None:
        return None
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationError(
            f"Environment variable {name} is not a valid {cast.__name__}",
            details={"value": raw},
        ) from None


@dataclass(frozen=True)
class Config:
    """Runner configuration."""

    rpc_url: str | None = None
    # Total callback rounds across every lookup of one call
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    # Timeouts (seconds)
    gateway_timeout: float = 10.0
    rpc_timeout: float = 10.0
    # Transient RPC failures only; contract reverts are never retried
    rpc_retry_attempts: int = 3
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigurationError("max_attempts must be at least 1")
        if self.gateway_timeout <= 0:
            raise ConfigurationError("gateway_timeout must be positive")
        if self.rpc_timeout <= 0:
            raise ConfigurationError("rpc_timeout must be positive")
        if self.rpc_retry_attempts < 1:
            raise ConfigurationError("rpc_retry_attempts must be at least 1")

    @classmethod
    def from_env(cls, **overrides: Any) -> Config:
        """Load configuration from environment variables."""
        values: dict[str, Any] = {
            "rpc_url": _get_env_var("CCIPREAD_RPC_URL"),
            "max_attempts": _parse_number(
                "CCIPREAD_MAX_ATTEMPTS", _get_env_var("CCIPREAD_MAX_ATTEMPTS"), int
            ),
            "gateway_timeout": _parse_number(
                "CCIPREAD_GATEWAY_TIMEOUT", _get_env_var("CCIPREAD_GATEWAY_TIMEOUT"), float
            ),
            "rpc_timeout": _parse_number(
                "CCIPREAD_RPC_TIMEOUT", _get_env_var("CCIPREAD_RPC_TIMEOUT"), float
            ),
            "rpc_retry_attempts": _parse_number(
                "CCIPREAD_RPC_RETRY_ATTEMPTS", _get_env_var("CCIPREAD_RPC_RETRY_ATTEMPTS"), int
            ),
            "log_level": _get_env_var("CCIPREAD_LOG_LEVEL"),
        }
        values.update(overrides)
        return cls(**{k: v for k, v in values.items() if v is not None})

    def with_updates(self, **updates: Any) -> Config:
        """Create a new Config with updated values."""
        current = {f.name: getattr(self, f.name) for f in fields(self)}
        current.update(updates)
        return Config(**current)
