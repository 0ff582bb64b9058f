# Copyright 2026 BootClock Contributors
# SPDX-License-Identifier: Apache-2.0

"""Elapsed-realtime, uptime and wall-clock readers.

Elapsed realtime keeps counting while the machine sleeps. Where the kernel
has a boot clock (CLOCK_BOOTTIME) it is read directly. Elsewhere it is derived
from the OS boot-time record:

    elapsed = wall_clock_now - boot_time

Both sides move together when the wall clock is stepped, but they are two
separate OS reads. read_clock() therefore samples the boot time before and
after the wall clock and only accepts the pair once two consecutive boot-time
reads agree.

Uptime (time since boot excluding deep sleep) is not tracked separately on any
supported platform; uptime_millis() returns elapsed realtime.
"""

from __future__ import annotations

import errno
import logging
import time

from bootclock._internal.provider import get_provider
from bootclock.config import get_config
from bootclock.errors import ClockUnavailable, ClockUnsupported
from bootclock.models import ClockReading

logger = logging.getLogger("bootclock")


def read_clock() -> ClockReading:
    """Return a wall-clock sample paired with a stable boot time.

    With a kernel boot clock the boot time is implied by the two samples.
    Otherwise the boot-time record is read around the wall-clock sample,
    retrying until the read after it equals the one before it. Retries are
    unbounded unless
    BOOTCLOCK_MAX_BOOT_TIME_RETRIES is set.

    Raises:
        ClockUnavailable: The boot-time query failed, or the retry cap was hit.
    """
    provider = get_provider()

    elapsed = provider.read_boot_clock_us()
    if elapsed is not None:
        now = provider.read_wall_clock_us()
        return ClockReading(boot_time_us=now - elapsed, wall_time_us=now)

    max_retries = get_config().max_boot_time_retries

    attempts = 0
    after = provider.read_boot_time_us()
    while True:
        before = after
        now = provider.read_wall_clock_us()
        after = provider.read_boot_time_us()
        attempts += 1
        if after == before:
            break
        logger.debug("Boot time moved from %d to %d us, re-reading", before, after)
        if max_retries and attempts > max_retries:
            raise ClockUnavailable(
                "boot_time",
                errno.EAGAIN,
                f"boot time did not settle after {attempts} reads",
            )

    if now < before:
        logger.warning(
            "Wall clock %d us precedes boot time %d us; clamping elapsed time to 0",
            now,
            before,
        )
    return ClockReading(boot_time_us=before, wall_time_us=now, attempts=attempts)


def elapsed_realtime() -> int:
    """Return milliseconds since boot, including time spent in sleep."""
    return read_clock().elapsed_ms


def elapsed_realtime_nanos() -> int:
    """Return nanoseconds since boot, including time spent in sleep.

    Resolution is one microsecond; the last three digits are always zero.
    """
    return read_clock().elapsed_ns


def uptime_millis() -> int:
    """Return milliseconds since boot, not counting time spent in deep sleep.

    No supported platform exposes an idle-exclusive counter, so this is the
    same clock as elapsed_realtime().
    """
    return elapsed_realtime()


def current_time_micro() -> int:
    """Return the wall-clock time in microseconds since the epoch."""
    return get_provider().read_wall_clock_us()


def current_time_millis() -> int:
    """Return the wall-clock time in milliseconds since the epoch."""
    return current_time_micro() // 1000


def set_current_time_millis(millis: int) -> bool:
    """Set the wall clock to ``millis`` since the epoch.

    Disabled unless BOOTCLOCK_ALLOW_SET_TIME is true. Lacking the privilege
    or the platform API is reported as False, never raised.

    Returns:
        True if the system clock was set.
    """
    if not get_config().allow_set_time:
        return False
    if millis < 0:
        return False

    settime = getattr(time, "clock_settime_ns", None)
    realtime = getattr(time, "CLOCK_REALTIME", None)
    if settime is None or realtime is None:
        logger.debug("clock_settime is not available on this platform")
        return False

    try:
        settime(realtime, millis * 1_000_000)
    except OSError as exc:
        logger.warning("Could not set wall clock: %s", exc)
        return False
    return True


def _thread_time_ns() -> int:
    thread_time_ns = getattr(time, "thread_time_ns", None)
    if thread_time_ns is None:
        raise ClockUnsupported("per-thread CPU time is not available on this platform")
    try:
        return thread_time_ns()
    except OSError as exc:
        raise ClockUnavailable.from_os_error("thread_time", exc) from exc


def current_thread_time_millis() -> int:
    """Return milliseconds of CPU time used by the calling thread."""
    return _thread_time_ns() // 1_000_000


def current_thread_time_micro() -> int:
    """Return microseconds of CPU time used by the calling thread."""
    return _thread_time_ns() // 1000
