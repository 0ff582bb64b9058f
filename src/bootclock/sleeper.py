# Copyright 2026 BootClock Contributors
# SPDX-License-Identifier: Apache-2.0

"""Deadline-based sleep that defers interruptions."""

from __future__ import annotations

import logging

from bootclock._internal.provider import get_provider
from bootclock.clock import uptime_millis
from bootclock.errors import SleepInterrupted
from bootclock.interrupt import interrupt

logger = logging.getLogger("bootclock")


def sleep(ms: int) -> None:
    """Wait at least ``ms`` milliseconds of uptime before returning.

    Unlike time.sleep(), an interruption does not end the wait early. It is
    absorbed, the remaining time is recomputed from the uptime clock and the
    wait resumes. Before returning, the calling thread's interruption flag is
    raised again so the next interruptible operation still observes it.
    """
    provider = get_provider()
    start = uptime_millis()
    remaining = ms
    was_interrupted = False

    while True:
        try:
            provider.wait(remaining)
        except SleepInterrupted:
            logger.debug("Sleep interrupted with %d ms remaining; resuming", remaining)
            was_interrupted = True
        remaining = start + ms - uptime_millis()
        if remaining <= 0:
            break

    if was_interrupted:
        interrupt()
