# scheduling.py
from __future__ import annotations

from typing import Callable, Optional, Protocol

from PyQt6.QtCore import QObject, QTimer


class ScheduledCall:
    """
    Handle for a callback scheduled to run once.

    ``cancel()`` is idempotent and safe after the call has run.
    """

    def __init__(self, fn: Callable[[], None], timer: Optional[QTimer] = None):
        self._fn = fn
        self._timer = timer
        self.fired = False
        self.cancelled = False

    @property
    def pending(self) -> bool:
        return not (self.fired or self.cancelled)

    def run(self) -> None:
        if not self.pending:
            return
        self.fired = True
        self._release()
        self._fn()

    def cancel(self) -> None:
        if not self.pending:
            return
        self.cancelled = True
        if self._timer is not None:
            self._timer.stop()
        self._release()

    def _release(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.deleteLater()


class Scheduler(Protocol):
    def schedule(self, delay_ms: int, fn: Callable[[], None]) -> ScheduledCall: ...

    def cancel(self, call: Optional[ScheduledCall]) -> None: ...


class QtScheduler:
    """Runs callbacks on the Qt event loop via single-shot timers."""

    def __init__(self, parent: Optional[QObject] = None):
        self._parent = parent

    def schedule(self, delay_ms: int, fn: Callable[[], None]) -> ScheduledCall:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        call = ScheduledCall(fn, timer)
        timer.timeout.connect(call.run)
        timer.start(max(0, int(delay_ms)))
        return call

    def cancel(self, call: Optional[ScheduledCall]) -> None:
        if call is not None:
            call.cancel()
