# Copyright 2026 BootClock Contributors
# SPDX-License-Identifier: Apache-2.0

"""Per-thread interruption flags.

Python threads cannot be interrupted from the outside, so bootclock keeps its
own flag per thread. Any thread may raise another thread's flag with
interrupt(); a thread blocked in wait_interruptibly() wakes immediately and
receives SleepInterrupted. A raised flag stays set until it is consumed by an
interruptible wait or by interrupted().

Usage:
    worker = threading.Thread(target=lambda: bootclock.sleep(10_000))
    worker.start()
    interrupt(worker)  # the sleep absorbs it; the flag is set when it returns
"""

from __future__ import annotations

import threading
import weakref

from bootclock.errors import SleepInterrupted

_lock = threading.Lock()
_flags: weakref.WeakKeyDictionary[threading.Thread, threading.Event] = weakref.WeakKeyDictionary()


def _flag_for(thread: threading.Thread | None) -> threading.Event:
    if thread is None:
        thread = threading.current_thread()
    with _lock:
        flag = _flags.get(thread)
        if flag is None:
            flag = threading.Event()
            _flags[thread] = flag
        return flag


def interrupt(thread: threading.Thread | None = None) -> None:
    """Raise the interruption flag of ``thread`` (default: the calling thread)."""
    flag = _flag_for(thread)
    with _lock:
        flag.set()


def is_interrupted(thread: threading.Thread | None = None) -> bool:
    """Return whether ``thread`` has a pending interruption, without clearing it."""
    return _flag_for(thread).is_set()


def interrupted() -> bool:
    """Return and clear the calling thread's pending interruption."""
    flag = _flag_for(None)
    with _lock:
        pending = flag.is_set()
        flag.clear()
    return pending


def wait_interruptibly(timeout_ms: int) -> None:
    """Block the calling thread for up to ``timeout_ms`` milliseconds.

    Raises:
        SleepInterrupted: The flag was raised before or during the wait. The
            flag is cleared before raising.
    """
    flag = _flag_for(None)
    if timeout_ms > 0:
        # callers re-wait for whatever remains past TIMEOUT_MAX
        woke = flag.wait(min(timeout_ms / 1000.0, threading.TIMEOUT_MAX))
    else:
        woke = flag.is_set()
    if woke:
        with _lock:
            flag.clear()
        raise SleepInterrupted(f"wait of {timeout_ms} ms interrupted")


def reset_interrupts() -> None:
    """Drop every recorded flag. Primarily useful for testing.

    Only safe while no thread is blocked in wait_interruptibly(): a waiter keeps
    its dropped flag, and a later interrupt() can no longer wake it.
    """
    with _lock:
        _flags.clear()
