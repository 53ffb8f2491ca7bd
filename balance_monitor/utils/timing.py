"""
Wall-clock timing helpers for the Balance Monitor.

Usage:
    from balance_monitor.utils.timing import stopwatch

    with stopwatch("deepseek-main") as sw:
        await engine.execute(descriptor)

    print(sw.elapsed_ms)

`elapsed_ms` is live while the block is running, so failure paths inside the
block can report the time spent so far.
"""

from __future__ import annotations

import contextlib
import time
from dataclasses import dataclass, field
from typing import Generator, Optional


@dataclass
class Stopwatch:
    """
    Container for a single elapsed-time measurement.
    """

    label: str
    start_ts: float = field(default=0.0)
    end_ts: Optional[float] = field(default=None)

    @property
    def elapsed_seconds(self) -> float:
        end = self.end_ts if self.end_ts is not None else time.perf_counter()
        return max(0.0, end - self.start_ts)

    @property
    def elapsed_ms(self) -> int:
        return int(round(self.elapsed_seconds * 1000))


@contextlib.contextmanager
def stopwatch(label: str = "block") -> Generator[Stopwatch, None, None]:
    """
    Context manager measuring wall-clock duration with `time.perf_counter`.
    """
    sw = Stopwatch(label=label, start_ts=time.perf_counter())
    try:
        yield sw
    finally:
        sw.end_ts = time.perf_counter()


__all__ = ["Stopwatch", "stopwatch"]
