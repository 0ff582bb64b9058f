# Copyright 2026 BootClock Contributors
# SPDX-License-Identifier: Apache-2.0

"""bootclock configuration loaded from environment variables.

All configuration is read from BOOTCLOCK_* environment variables with sensible defaults.
The config singleton is initialized once and reused until reset_config() is called.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env(key: str, default: str = "") -> str:
    """Read a string setting."""
    return os.environ.get(key, default)


def _env_bool(key: str, default: bool = False) -> bool:
    """Read an opt-in flag; only true/1/yes enable it."""
    raw = os.environ.get(key)
    if raw is None:
        return default
    return raw.strip().lower() in ("true", "1", "yes")


def _env_int(key: str, default: int = 0) -> int:
    """Read an integer setting, keeping the default when unparsable."""
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class BootClockConfig:
    """Immutable configuration read from environment variables.

    Attributes:
        max_boot_time_retries: Cap on boot-time re-reads while computing elapsed
            time. 0 means retry until two consecutive reads agree.
        allow_set_time: Whether set_current_time_millis() may touch the system clock.
        log_level: Python logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        debug: Enable verbose stderr logging.
    """

    max_boot_time_retries: int = 0
    allow_set_time: bool = False
    log_level: str = "INFO"
    debug: bool = False

    @classmethod
    def from_env(cls) -> BootClockConfig:
        """Create a config instance by reading BOOTCLOCK_* environment variables.

        Environment Variables:
            BOOTCLOCK_MAX_BOOT_TIME_RETRIES: Default 0 (unbounded).
            BOOTCLOCK_ALLOW_SET_TIME: Default "false".
            BOOTCLOCK_LOG_LEVEL: Default "INFO". Python logging level.
            BOOTCLOCK_DEBUG: Default "false". Enable verbose logging.
        """
        return cls(
            max_boot_time_retries=max(0, _env_int("BOOTCLOCK_MAX_BOOT_TIME_RETRIES", 0)),
            allow_set_time=_env_bool("BOOTCLOCK_ALLOW_SET_TIME"),
            log_level=_env("BOOTCLOCK_LOG_LEVEL", "INFO").upper(),
            debug=_env_bool("BOOTCLOCK_DEBUG"),
        )


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_config: BootClockConfig | None = None


def get_config() -> BootClockConfig:
    """Return the global BootClockConfig singleton (lazy-initialized from env)."""
    global _config
    if _config is None:
        _config = BootClockConfig.from_env()
    return _config


def reset_config() -> None:
    """Reset the global config singleton. Primarily useful for testing."""
    global _config
    _config = None
