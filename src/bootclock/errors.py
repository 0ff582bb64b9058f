# Copyright 2026 BootClock Contributors
# SPDX-License-Identifier: Apache-2.0

"""Exception types raised by bootclock."""

from __future__ import annotations

import errno as _errno
import os


class ClockError(Exception):
    """Base class for all bootclock errors."""


class ClockUnavailable(ClockError, OSError):
    """A platform clock query failed.

    Carries the errno reported by the platform and the name of the failing
    call (e.g. ``"sysctl"``), so callers can still match on ``OSError``.
    """

    def __init__(self, call: str, code: int, detail: str | None = None) -> None:
        message = detail or os.strerror(code)
        OSError.__init__(self, code, f"{call} failed: {message}")
        self.call = call

    @classmethod
    def from_os_error(cls, call: str, exc: OSError) -> ClockUnavailable:
        code = exc.errno if exc.errno is not None else _errno.EIO
        return cls(call, code, exc.strerror)


class ClockUnsupported(ClockError, NotImplementedError):
    """The operation has no implementation on this platform."""


class SleepInterrupted(ClockError):
    """An interruptible wait was woken by an interruption request."""
