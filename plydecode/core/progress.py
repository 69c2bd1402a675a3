from __future__ import annotations
from typing import Callable, Optional, Protocol

from tqdm import tqdm


class ProgressSink(Protocol):
    def set_total(self, total: int) -> None: ...
    def update(self, count: int) -> None: ...
    def finish(self) -> None: ...


class NullProgress:
    def set_total(self, total: int) -> None:
        pass

    def update(self, count: int) -> None:
        pass

    def finish(self) -> None:
        pass


class CountingProgressReporter:
    """Turns absolute counts into percentages for a plain callback.

    ``callback(percent)`` is called only when the integer percentage changes;
    its return value is ignored.
    """

    def __init__(self, callback: Optional[Callable[[float], bool]] = None) -> None:
        self.callback = callback
        self.total = -1
        self.last_percent = -1

    def set_total(self, total: int) -> None:
        self.total = int(total)
        self.last_percent = -1

    def update(self, count: int) -> None:
        if self.callback is None or self.total <= 0:
            return
        percent = min(100, int(count * 100 / self.total))
        if percent != self.last_percent:
            self.last_percent = percent
            self.callback(float(percent))

    def finish(self) -> None:
        if self.callback is not None:
            self.last_percent = 100
            self.callback(100.0)


class TqdmProgress:
    """Console progress bar for one element decode."""

    def __init__(self, desc: str = "Read PLY", unit: str = "vtx", disable: bool = False) -> None:
        self.desc = desc
        self.unit = unit
        self.disable = disable
        self._bar: Optional[tqdm] = None

    def set_total(self, total: int) -> None:
        if self._bar is not None:
            self._bar.close()
        self._bar = tqdm(total=total, desc=self.desc, unit=self.unit, disable=self.disable)

    def update(self, count: int) -> None:
        # Every property reports the same counts; repeats are ignored.
        if self._bar is not None and count > self._bar.n:
            self._bar.update(count - self._bar.n)

    def finish(self) -> None:
        if self._bar is None:
            return
        if self._bar.total is not None and self._bar.n < self._bar.total:
            self._bar.update(self._bar.total - self._bar.n)
        self._bar.close()
        self._bar = None
