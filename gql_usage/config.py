"""Configuration for usage reporting.

Explicit values win, then ``GQL_USAGE_*`` environment variables (the CLI
loads ``.env`` at start-up), then the defaults below.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, version
from typing import Any, Callable

DEFAULT_ENDPOINT = "https://app.graphql-hive.com/usage"
DEFAULT_CLIENT_NAME = "gql-usage"

try:
    PACKAGE_VERSION = version("gql-usage")
except PackageNotFoundError:
    PACKAGE_VERSION = "0.1.0"


def _env(name: str, parse: Callable[[str], Any], default: Any) -> Any:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return parse(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from None


@dataclass
class UsageConfig:
    """Where and how often usage reports are sent."""

    token: str | None = None
    endpoint: str = DEFAULT_ENDPOINT
    client_name: str = DEFAULT_CLIENT_NAME
    client_version: str = PACKAGE_VERSION

    # Fraction of executions recorded
    sample_rate: float = 1.0

    # Batching
    send_interval_ms: float = 5_000
    max_size: int = 25

    @classmethod
    def from_env(cls, **overrides: Any) -> UsageConfig:
        """Read ``GQL_USAGE_*`` variables; non-None ``overrides`` take precedence."""
        values: dict[str, Any] = {
            "token": _env("GQL_USAGE_TOKEN", str, None),
            "endpoint": _env("GQL_USAGE_ENDPOINT", str, DEFAULT_ENDPOINT),
            "client_name": _env("GQL_USAGE_CLIENT_NAME", str, DEFAULT_CLIENT_NAME),
            "client_version": _env("GQL_USAGE_CLIENT_VERSION", str, PACKAGE_VERSION),
            "sample_rate": _env("GQL_USAGE_SAMPLE_RATE", float, 1.0),
            "send_interval_ms": _env("GQL_USAGE_SEND_INTERVAL_MS", float, 5_000),
            "max_size": _env("GQL_USAGE_MAX_SIZE", int, 25),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
