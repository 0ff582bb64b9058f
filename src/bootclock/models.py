# Copyright 2026 BootClock Contributors
# SPDX-License-Identifier: Apache-2.0

"""Pydantic v2 models for clock readings."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ClockReading(BaseModel):
    """A wall-clock sample paired with the boot time it was taken under.

    Both timestamps are microseconds since the epoch. The pair is consistent:
    the boot-time record read before and after the wall sample was identical.
    """

    model_config = ConfigDict(frozen=True)

    boot_time_us: int = Field(description="Boot time in microseconds since epoch")
    wall_time_us: int = Field(description="Wall-clock sample in microseconds since epoch")
    attempts: int = Field(default=1, ge=1, description="Wall-clock samples taken")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def elapsed_us(self) -> int:
        """Microseconds since boot, never negative."""
        return max(0, self.wall_time_us - self.boot_time_us)

    @property
    def elapsed_ms(self) -> int:
        return self.elapsed_us // 1000

    @property
    def elapsed_ns(self) -> int:
        return self.elapsed_us * 1000
