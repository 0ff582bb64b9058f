# Copyright 2026 BootClock Contributors
# SPDX-License-Identifier: Apache-2.0

"""Platform clock provider: the OS calls every clock is built from.

- read_boot_clock_us(): time since boot from a kernel counter, or None
- read_boot_time_us(): boot time in microseconds since epoch
- read_wall_clock_us(): current wall-clock time in microseconds since epoch
- wait(ms): interruptible block of the calling thread

Where the kernel exposes CLOCK_BOOTTIME (Linux), elapsed time is read from it
directly and wall-clock steps cannot move it. Elsewhere it is derived from the
boot-time record: on macOS, FreeBSD, NetBSD and DragonFly from the
kern.boottime sysctl via ctypes, which keeps microsecond precision, and on the
remaining platforms through psutil.boot_time(). Neither source is cached: the
kernel recomputes the record when the wall clock is stepped.
"""

from __future__ import annotations

import ctypes
import errno
import sys
import time
from typing import Protocol, runtime_checkable

import psutil

from bootclock.errors import ClockUnavailable
from bootclock.interrupt import wait_interruptibly

# OpenBSD has kern.boottime but no sysctlbyname(); psutil covers it
_SYSCTL_PLATFORMS = ("darwin", "freebsd", "netbsd", "dragonfly")


@runtime_checkable
class ClockProvider(Protocol):
    """Capability interface over the host's clock and wait primitives."""

    def read_boot_clock_us(self) -> int | None: ...

    def read_boot_time_us(self) -> int: ...

    def read_wall_clock_us(self) -> int: ...

    def wait(self, ms: int) -> None: ...


class _Timeval(ctypes.Structure):
    """struct timeval with a long tv_usec (FreeBSD, DragonFly)."""

    _fields_ = [("tv_sec", ctypes.c_long), ("tv_usec", ctypes.c_long)]


class _Timeval32(ctypes.Structure):
    """struct timeval with a 32-bit suseconds_t (Darwin, NetBSD)."""

    _fields_ = [("tv_sec", ctypes.c_long), ("tv_usec", ctypes.c_int32)]


def timeval_type(platform: str) -> type[ctypes.Structure]:
    """Return the struct timeval layout used by ``platform``."""
    if platform.startswith(("darwin", "netbsd")):
        return _Timeval32
    return _Timeval


class SystemClockProvider:
    """ClockProvider backed by the running operating system."""

    def __init__(self, platform: str | None = None) -> None:
        self._platform = platform or sys.platform
        self._libc: ctypes.CDLL | None = None

    @property
    def uses_sysctl(self) -> bool:
        return self._platform.startswith(_SYSCTL_PLATFORMS)

    @property
    def uses_boot_clock(self) -> bool:
        return self._platform.startswith("linux") and hasattr(time, "CLOCK_BOOTTIME")

    def read_boot_clock_us(self) -> int | None:
        """Return microseconds since boot from CLOCK_BOOTTIME, or None if absent.

        Raises:
            ClockUnavailable: clock_gettime failed.
        """
        if not self.uses_boot_clock:
            return None
        try:
            return time.clock_gettime_ns(time.CLOCK_BOOTTIME) // 1000
        except OSError as exc:
            raise ClockUnavailable.from_os_error("clock_gettime", exc) from exc

    def read_boot_time_us(self) -> int:
        """Return the boot time in microseconds since the epoch.

        Raises:
            ClockUnavailable: The platform query failed.
        """
        if self.uses_sysctl:
            return self._sysctl_boot_time_us()
        return self._psutil_boot_time_us()

    def read_wall_clock_us(self) -> int:
        return time.time_ns() // 1000

    def wait(self, ms: int) -> None:
        wait_interruptibly(ms)

    def _load_libc(self) -> ctypes.CDLL:
        if self._libc is None:
            libc = ctypes.CDLL(None, use_errno=True)
            try:
                sysctlbyname = libc.sysctlbyname
            except AttributeError as exc:
                raise ClockUnavailable("sysctl", errno.ENOSYS, "sysctlbyname not found") from exc
            sysctlbyname.argtypes = [
                ctypes.c_char_p,
                ctypes.c_void_p,
                ctypes.POINTER(ctypes.c_size_t),
                ctypes.c_void_p,
                ctypes.c_size_t,
            ]
            sysctlbyname.restype = ctypes.c_int
            self._libc = libc
        return self._libc

    def _sysctl_boot_time_us(self) -> int:
        libc = self._load_libc()
        tv = timeval_type(self._platform)()
        size = ctypes.c_size_t(ctypes.sizeof(tv))
        result = libc.sysctlbyname(b"kern.boottime", ctypes.byref(tv), ctypes.byref(size), None, 0)
        if result != 0:
            raise ClockUnavailable("sysctl", ctypes.get_errno() or errno.EIO)
        return tv.tv_sec * 1_000_000 + tv.tv_usec

    def _psutil_boot_time_us(self) -> int:
        try:
            boot_time = psutil.boot_time()
        except OSError as exc:
            raise ClockUnavailable.from_os_error("boot_time", exc) from exc
        except RuntimeError as exc:
            # psutil raises RuntimeError when /proc/stat has no btime line
            raise ClockUnavailable("boot_time", errno.EIO, str(exc)) from exc
        return round(boot_time * 1_000_000)


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_provider: ClockProvider | None = None


def get_provider() -> ClockProvider:
    """Return the active ClockProvider (lazy-initialized to the system provider)."""
    global _provider
    if _provider is None:
        _provider = SystemClockProvider()
    return _provider


def set_provider(provider: ClockProvider) -> None:
    """Replace the active ClockProvider, e.g. with a scripted one in tests."""
    global _provider
    _provider = provider


def reset_provider() -> None:
    """Restore the system provider on next use."""
    global _provider
    _provider = None
