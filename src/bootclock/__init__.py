# Copyright 2026 BootClock Contributors
# SPDX-License-Identifier: Apache-2.0

"""bootclock: boot-relative clocks that keep counting through system sleep.

Quick Start:
    import bootclock

    start = bootclock.elapsed_realtime()
    bootclock.sleep(250)
    assert bootclock.elapsed_realtime() - start >= 250

Public API:
    - elapsed_realtime / elapsed_realtime_nanos: time since boot, including sleep
    - uptime_millis: time since boot (same clock as elapsed_realtime)
    - current_time_micro / current_time_millis: wall-clock time since the epoch
    - set_current_time_millis: set the wall clock, where permitted
    - sleep: wait at least N ms, deferring interruptions
    - interrupt / interrupted / is_interrupted: per-thread interruption flags
    - init: apply configuration overrides and logging
"""

from __future__ import annotations

__version__ = "0.1.0"
__all__ = [
    "ClockError",
    "ClockReading",
    "ClockUnavailable",
    "ClockUnsupported",
    "SleepInterrupted",
    "current_thread_time_micro",
    "current_thread_time_millis",
    "current_time_micro",
    "current_time_millis",
    "elapsed_realtime",
    "elapsed_realtime_nanos",
    "init",
    "interrupt",
    "interrupted",
    "is_interrupted",
    "read_clock",
    "set_current_time_millis",
    "sleep",
    "uptime_millis",
    "__version__",
]

import logging
import os

from bootclock._internal.provider import reset_provider
from bootclock.clock import (
    current_thread_time_micro,
    current_thread_time_millis,
    current_time_micro,
    current_time_millis,
    elapsed_realtime,
    elapsed_realtime_nanos,
    read_clock,
    set_current_time_millis,
    uptime_millis,
)
from bootclock.config import get_config, reset_config
from bootclock.errors import ClockError, ClockUnavailable, ClockUnsupported, SleepInterrupted
from bootclock.interrupt import interrupt, interrupted, is_interrupted
from bootclock.models import ClockReading
from bootclock.sleeper import sleep


def init(
    *,
    max_boot_time_retries: int | None = None,
    allow_set_time: bool | None = None,
    log_level: str | None = None,
    debug: bool | None = None,
) -> None:
    """Initialize bootclock with custom configuration.

    Any provided arguments override the corresponding BOOTCLOCK_* environment
    variables.

    Args:
        max_boot_time_retries: Overrides BOOTCLOCK_MAX_BOOT_TIME_RETRIES.
        allow_set_time: Overrides BOOTCLOCK_ALLOW_SET_TIME.
        log_level: Overrides BOOTCLOCK_LOG_LEVEL.
        debug: Overrides BOOTCLOCK_DEBUG.
    """
    if max_boot_time_retries is not None:
        os.environ["BOOTCLOCK_MAX_BOOT_TIME_RETRIES"] = str(max_boot_time_retries)
    if allow_set_time is not None:
        os.environ["BOOTCLOCK_ALLOW_SET_TIME"] = str(allow_set_time).lower()
    if log_level is not None:
        os.environ["BOOTCLOCK_LOG_LEVEL"] = log_level
    if debug is not None:
        os.environ["BOOTCLOCK_DEBUG"] = str(debug).lower()

    # Reset singletons so they pick up new env vars
    reset_config()
    reset_provider()

    config = get_config()
    level = logging.DEBUG if config.debug else getattr(logging, config.log_level, logging.INFO)
    bootclock_logger = logging.getLogger("bootclock")
    bootclock_logger.setLevel(level)

    if config.debug and not bootclock_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[bootclock] %(levelname)s %(name)s: %(message)s"))
        bootclock_logger.addHandler(handler)
