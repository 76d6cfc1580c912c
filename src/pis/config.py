"""Runtime configuration read from environment variables.

Settings are resolved once at startup by :meth:`Settings.from_env` and
threaded explicitly into the command handlers: nothing reads
``os.environ`` after that point.
"""

from __future__ import annotations

import math
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pis.exceptions import ConfigError

DEFAULT_STADA_URL: str = (
    "https://apis.deutschebahn.com/db-api-marketplace/apis/station-data/v2/stations"
)
DEFAULT_HTTP_TIMEOUT: float = 30.0
DEFAULT_LOG_LEVEL: str = "WARNING"
DEFAULT_SEARCH_LIMIT: int = 10
DEFAULT_SELFTEST_CYCLES: int = 10_000

_LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved application settings."""

    db_client_id: str | None = None
    db_api_key: str | None = None
    stada_url: str = DEFAULT_STADA_URL
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL
    search_limit: int = DEFAULT_SEARCH_LIMIT
    selftest_cycles: int = DEFAULT_SELFTEST_CYCLES

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from *environ* (defaults to ``os.environ``).

        Empty values are treated as unset.

        Raises
        ------
        ConfigError
            When a numeric or log-level variable holds an invalid value.
        """
        env = os.environ if environ is None else environ

        def get(key: str) -> str | None:
            value = env.get(key, "").strip()
            return value or None

        log_level = (get("PIS_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
        if log_level not in _LOG_LEVELS:
            raise ConfigError(
                f"Invalid PIS_LOG_LEVEL: {log_level}",
                hint=f"Use one of: {', '.join(_LOG_LEVELS)}",
            )

        return cls(
            db_client_id=get("PIS_DB_CLIENT_ID"),
            db_api_key=get("PIS_DB_API_KEY"),
            stada_url=get("PIS_STADA_URL") or DEFAULT_STADA_URL,
            http_timeout=_positive(
                "PIS_HTTP_TIMEOUT", get("PIS_HTTP_TIMEOUT"), float, DEFAULT_HTTP_TIMEOUT,
            ),
            log_level=log_level,
            search_limit=_positive(
                "PIS_SEARCH_LIMIT", get("PIS_SEARCH_LIMIT"), int, DEFAULT_SEARCH_LIMIT,
            ),
            selftest_cycles=_positive(
                "PIS_SELFTEST_CYCLES", get("PIS_SELFTEST_CYCLES"), int, DEFAULT_SELFTEST_CYCLES,
            ),
        )


def _positive(key: str, raw: str | None, kind: type, default: float) -> Any:
    """Parse *raw* with *kind* and require a value greater than zero."""
    if raw is None:
        return default
    try:
        value = kind(raw)
    except ValueError as exc:
        raise ConfigError(f"Invalid {key}: {raw!r}") from exc
    if not math.isfinite(value) or value <= 0:
        raise ConfigError(f"{key} must be a finite number greater than zero, got {raw!r}")
    return value
