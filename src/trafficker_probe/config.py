"""Probe settings loaded from the environment."""

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_WS_URL = "ws://127.0.0.1:8080/ws"
DEFAULT_HTTP_URL = "http://localhost:8080/api/probe"
DEFAULT_TIMEOUT_MS = 30000


def parse_timeout_ms(value: Optional[str], env_var: str = "PROBE_TIMEOUT_MS") -> Optional[float]:
    """
    Parse a timeout string in milliseconds.

    An empty value yields the default; "none", "off" or "0" disable the timeout.

    Raises:
        ValueError: If the value is not a non-negative number.
    """
    if value is None or value.strip() == "":
        return float(DEFAULT_TIMEOUT_MS)

    normalized = value.strip().lower()
    if normalized in ("none", "off"):
        return None

    try:
        timeout_ms = float(normalized)
    except ValueError:
        raise ValueError(f"{env_var} must be a number of milliseconds, got {value!r}")

    if timeout_ms < 0:
        raise ValueError(f"{env_var} must not be negative, got {value!r}")
    return timeout_ms or None


@dataclass
class ProbeSettings:
    """Target addresses and limits shared by both probes."""

    ws_url: str = DEFAULT_WS_URL
    http_url: str = DEFAULT_HTTP_URL
    # None waits forever
    timeout_ms: Optional[float] = float(DEFAULT_TIMEOUT_MS)
    log_level: str = "INFO"

    @property
    def timeout_seconds(self) -> Optional[float]:
        if self.timeout_ms is None:
            return None
        return self.timeout_ms / 1000.0

    @classmethod
    def from_env(cls) -> "ProbeSettings":
        """Load settings from environment variables."""
        return cls(
            ws_url=os.getenv("PROBE_WS_URL", DEFAULT_WS_URL),
            http_url=os.getenv("PROBE_HTTP_URL", DEFAULT_HTTP_URL),
            timeout_ms=parse_timeout_ms(os.getenv("PROBE_TIMEOUT_MS")),
            log_level=os.getenv("PROBE_LOG_LEVEL", "INFO"),
        )


_settings: Optional[ProbeSettings] = None


def get_settings() -> ProbeSettings:
    """Get the process-wide settings instance."""
    global _settings
    if _settings is None:
        _settings = ProbeSettings.from_env()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
