import asyncio
import logging
import math
import time
from numbers import Real
from typing import Callable, Optional

from polling.events import TickEvent
from polling.exceptions import ClockError, create_interval_error


def validate_interval(value) -> float:
    """Return ``value`` as float milliseconds, or raise IntervalError."""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise create_interval_error(value, "interval must be a number of milliseconds")
    interval = float(value)
    if math.isnan(interval) or math.isinf(interval):
        raise create_interval_error(value, "interval must be finite")
    if interval <= 0:
        raise create_interval_error(value)
    return interval


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class IntervalClock:
    """
    Clock source behind a poller.

    - Fires ``callback(TickEvent)`` once per interval on its own asyncio task.
    - Drift correction: each deadline is the previous one plus the interval.
    - Changing the interval while armed restarts the pending wait.
    - close() disarms permanently; a closed clock cannot be armed again.

    The callback runs on the event loop and must not block. Arm, disarm,
    interval changes and close may be requested from other threads once
    the clock knows its loop; they are then marshalled onto it.
    """

    def __init__(self, interval: float, callback: Callable[[TickEvent], None], name: str = "clock"):
        self._interval = validate_interval(interval)
        self._callback = callback
        self.name = name
        self.logger = logging.getLogger("IntervalClock")

        self._armed = False
        self._closed = False
        self._sequence = 0
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def interval(self) -> float:
        """Tick period in milliseconds."""
        return self._interval

    @interval.setter
    def interval(self, value: float):
        self._interval = validate_interval(value)
        if self._armed:
            self._run_in_loop(self._restart)

    @property
    def armed(self) -> bool:
        return self._armed

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def sequence(self) -> int:
        """Number of ticks fired so far."""
        return self._sequence

    def arm(self):
        """Start firing ticks. No-op when already armed."""
        if self._closed:
            raise ClockError(f"Clock '{self.name}' is closed", {"clock": self.name})
        if self._armed:
            return

        loop = _running_loop()
        if loop is None:
            loop = self._loop
        if loop is None or loop.is_closed():
            raise ClockError(
                f"Clock '{self.name}' needs a running event loop to arm",
                {"clock": self.name},
            )

        self._loop = loop
        self._armed = True
        self._run_in_loop(self._restart)

    def disarm(self):
        """Stop firing ticks. No-op when already disarmed."""
        if not self._armed:
            return
        self._armed = False
        self._run_in_loop(self._cancel_task)

    def close(self):
        """Disarm and release the clock. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._armed = False
        self._run_in_loop(self._cancel_task)
        self._callback = None

    def _run_in_loop(self, fn: Callable[[], None]):
        loop = self._loop
        if loop is None or loop.is_closed() or not loop.is_running() or _running_loop() is loop:
            fn()
        else:
            loop.call_soon_threadsafe(fn)

    def _cancel_task(self):
        task, self._task = self._task, None
        if task is not None and not task.done() and not task.get_loop().is_closed():
            task.cancel()

    def _restart(self):
        self._cancel_task()
        if not self._armed or self._loop is None or self._loop.is_closed():
            return
        self._task = self._loop.create_task(self._run(), name=f"{self.name}-clock")

    async def _run(self):
        """
        The tick loop.
        Deadlines advance by one interval per tick so ticks do not drift.
        """
        loop = asyncio.get_running_loop()
        me = asyncio.current_task()
        deadline = loop.time() + self._interval / 1000.0

        while True:
            delay = deadline - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)

            # Superseded by disarm/restart while the sleep was completing
            if not self._armed or self._task is not me:
                return

            self._sequence += 1
            tick = TickEvent(timestamp=time.time(), sequence=self._sequence, interval=self._interval)
            callback = self._callback
            if callback is not None:
                try:
                    callback(tick)
                except Exception as e:
                    # Do NOT let a failing callback stop the clock
                    self.logger.error(f"⚠️ Error in {self.name} tick callback: {e}", exc_info=True)

            period = self._interval / 1000.0
            deadline += period
            now = loop.time()
            if deadline <= now:
                # Fell a full period behind: missed ticks are not replayed
                deadline = now + period

    def __repr__(self) -> str:
        state = "closed" if self._closed else ("armed" if self._armed else "disarmed")
        return f"<IntervalClock name={self.name!r} interval={self._interval}ms {state}>"
