# Copyright 2026 BootClock Contributors
# SPDX-License-Identifier: Apache-2.0

"""Shared pytest fixtures for bootclock tests."""

from __future__ import annotations

import logging
import os
import time
from typing import Callable

import pytest

import psutil

from bootclock._internal.provider import SystemClockProvider, reset_provider, set_provider
from bootclock.config import reset_config
from bootclock.errors import SleepInterrupted
from bootclock.interrupt import reset_interrupts

BOOT_TIME_US = 1_700_000_000_000_000


class FakeClockProvider:
    """Scripted ClockProvider.

    Without ``has_boot_clock`` elapsed time must be derived from boot-time
    reads, which consume ``boot_times`` first and then repeat the last
    value. Waits advance the fake wall clock instead of blocking; the first
    ``interruptions`` waits stop halfway and raise SleepInterrupted.
    """

    def __init__(self, boot_time_us: int = BOOT_TIME_US, uptime_us: int = 5_000_000) -> None:
        self.boot_time_us = boot_time_us
        self.wall_time_us = boot_time_us + uptime_us
        self.boot_times: list[int] = []
        self.boot_error: OSError | None = None
        self.has_boot_clock = False
        self.boot_reads = 0
        self.wall_step_us = 0
        self.wall_samples: list[int] = []
        self.wait_calls: list[int] = []
        self.interruptions = 0
        self.on_wait: Callable[[FakeClockProvider, int], None] | None = None

    def read_boot_clock_us(self) -> int | None:
        if not self.has_boot_clock:
            return None
        return self.wall_time_us - self.boot_time_us

    def read_boot_time_us(self) -> int:
        self.boot_reads += 1
        if self.boot_error is not None:
            raise self.boot_error
        if self.boot_times:
            self.boot_time_us = self.boot_times.pop(0)
        return self.boot_time_us

    def read_wall_clock_us(self) -> int:
        value = self.wall_time_us
        self.wall_samples.append(value)
        self.wall_time_us += self.wall_step_us
        return value

    def wait(self, ms: int) -> None:
        self.wait_calls.append(ms)
        if self.on_wait is not None:
            self.on_wait(self, ms)
        if self.interruptions:
            self.interruptions -= 1
            self.advance(max(ms, 0) // 2 * 1000)
            raise SleepInterrupted("fake interruption")
        self.advance(max(ms, 0) * 1000)

    def advance(self, us: int) -> None:
        """Let ``us`` microseconds of real time pass."""
        self.wall_time_us += us

    def step_wall_clock(self, us: int) -> None:
        """Adjust the wall clock; the kernel shifts its boot-time record with it."""
        self.wall_time_us += us
        self.boot_time_us += us


@pytest.fixture(autouse=True)
def reset_bootclock():
    """Reset all bootclock singletons before and after each test."""
    reset_config()
    reset_provider()
    reset_interrupts()
    for key in list(os.environ.keys()):
        if key.startswith("BOOTCLOCK_"):
            del os.environ[key]
    yield
    reset_config()
    reset_provider()
    reset_interrupts()
    for key in list(os.environ.keys()):
        if key.startswith("BOOTCLOCK_"):
            del os.environ[key]
    bootclock_logger = logging.getLogger("bootclock")
    bootclock_logger.handlers.clear()
    bootclock_logger.setLevel(logging.NOTSET)


@pytest.fixture
def fake_provider():
    """Install a FakeClockProvider as the active provider."""
    provider = FakeClockProvider()
    set_provider(provider)
    return provider


class SimulatedKernel:
    """Linux-style clocks: CLOCK_BOOTTIME plus a wall clock offset from it.

    The boot-time record (``/proc/stat`` btime) is the offset cut to whole
    seconds, as the kernel reports it.
    """

    CLOCK_BOOTTIME = 7

    def __init__(self, offset_ns: int) -> None:
        self.offset_ns = offset_ns
        self.boottime_ns = 5_000_000_000

    def clock_gettime_ns(self, clk_id: int) -> int:
        assert clk_id == self.CLOCK_BOOTTIME
        return self.boottime_ns

    def time_ns(self) -> int:
        return self.offset_ns + self.boottime_ns

    def btime(self) -> float:
        return float(self.offset_ns // 1_000_000_000)

    def run(self, ms: int) -> None:
        self.boottime_ns += ms * 1_000_000

    def step_wall_clock(self, ms: int) -> None:
        self.offset_ns += ms * 1_000_000


class KernelClockProvider(SystemClockProvider):
    """System provider on a SimulatedKernel whose waits run the kernel clock.

    ``wakeups`` maps a wait number (1-based) to the milliseconds after which
    that wait returns early.
    """

    def __init__(self, kernel: SimulatedKernel) -> None:
        super().__init__(platform="linux")
        self.kernel = kernel
        self.wait_calls: list[int] = []
        self.wakeups: dict[int, int] = {}
        self.on_wait: Callable[[SimulatedKernel, int], None] | None = None

    def wait(self, ms: int) -> None:
        self.wait_calls.append(ms)
        ran = self.wakeups.get(len(self.wait_calls), max(ms, 0))
        self.kernel.run(ran)
        if self.on_wait is not None:
            self.on_wait(self.kernel, len(self.wait_calls))


@pytest.fixture
def kernel_provider(monkeypatch):
    """Install a KernelClockProvider over a kernel booted at x.3 s past a second."""
    kernel = SimulatedKernel(offset_ns=1_700_000_000_300_000_000)
    monkeypatch.setattr(time, "CLOCK_BOOTTIME", SimulatedKernel.CLOCK_BOOTTIME, raising=False)
    monkeypatch.setattr(time, "clock_gettime_ns", kernel.clock_gettime_ns, raising=False)
    monkeypatch.setattr(time, "time_ns", kernel.time_ns)
    monkeypatch.setattr(psutil, "boot_time", kernel.btime)
    provider = KernelClockProvider(kernel)
    set_provider(provider)
    return provider
