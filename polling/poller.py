"""
Poller: repeated invocation of one unit of work at a fixed interval.

A poller owns exactly one IntervalClock. Each tick of the clock is
forwarded to ``do_work`` on its own dispatch task, so the clock keeps
its cadence while work runs.

Policies:
- Overlap: skip-if-busy. A tick arriving while the previous ``do_work``
  is still running is dropped and counted in ``stats.ticks_skipped``.
- Work failures: logged, counted and passed to ``on_error``; ticking
  continues.
- After dispose(): start_timer(), stop_timer() and the property setters
  raise PollerDisposedError. dispose() and aclose() are no-ops.

Usage:
    async def check_inbox(sender, tick):
        ...

    async with Poller(check_inbox, interval=5000, name="inbox") as poller:
        poller.start_timer()
        ...
"""

import asyncio
import inspect
import logging
import time
import warnings
from typing import Any, Optional

from config import polling as polling_config
from polling.clock import IntervalClock, validate_interval
from polling.events import PollerState, PollerStats, TickEvent
from polling.exceptions import ConfigurationError, create_disposed_error
from polling.interfaces import ErrorReporter, HandlerLike
from polling.observability import metrics

logger = logging.getLogger(__name__)


class Poller:
    """
    Interval-driven work dispatcher with a start/stop/dispose lifecycle.

    Work is supplied either as a handler (any object with
    ``do_work(sender, tick)``, or a plain callable with that signature)
    or by overriding ``do_work`` in a subclass. Coroutine functions are
    awaited on the event loop; plain functions run in a worker thread.

    Control methods do not block. They are meant to be called from the
    event loop thread; calls from other threads take effect on the
    dispatch decision immediately and on the clock once the loop runs.
    """

    def __init__(
        self,
        handler: Optional[HandlerLike] = None,
        interval: Optional[float] = None,
        name: Optional[str] = None,
        on_error: Optional[ErrorReporter] = None,
    ):
        """
        Initialize a disarmed poller.

        Args:
            handler: Work to run on each tick (TickHandler or callable)
            interval: Tick period in milliseconds (defaults to config DEFAULT_INTERVAL_MS)
            name: Identifier used in logs and metrics
            on_error: Reporter called with (poller, exception) when work fails

        Raises:
            IntervalError: If interval is not a positive number
            ConfigurationError: If there is no handler and do_work is not overridden
        """
        if interval is None:
            interval = polling_config.DEFAULT_INTERVAL_MS
        self._interval = validate_interval(interval)
        self._work = self._resolve_handler(handler)
        if type(self).do_work is not Poller.do_work:
            self._target = self.do_work
        elif self._work is not None:
            self._target = self._work
        else:
            raise ConfigurationError(
                f"{type(self).__name__} needs a handler or a do_work() override",
                {"poller": type(self).__name__},
            )
        self._on_error = on_error
        self._name = name

        self._enabled = False
        self._disposed = False
        self._dispatch_task: Optional[asyncio.Task] = None
        self._stats = PollerStats()
        self._clock: Optional[IntervalClock] = IntervalClock(
            self._interval, self._on_elapsed, name=name or type(self).__name__
        )

    @staticmethod
    def _resolve_handler(handler):
        if handler is None:
            return None

        work = getattr(handler, "do_work", None)
        if work is None and callable(handler):
            work = handler
        if not callable(work):
            raise ConfigurationError(
                "Handler must provide do_work(sender, tick) or be callable",
                {"handler": repr(handler)},
            )
        return work

    # --- Properties ---

    @property
    def interval(self) -> float:
        """Tick period in milliseconds."""
        return self._interval

    @interval.setter
    def interval(self, value: float):
        if self._disposed:
            raise create_disposed_error("set the interval of", self._name)
        interval = validate_interval(value)
        self._interval = interval
        self._clock.interval = interval
        logger.debug(f"⏱️ Poller {self._label}: interval set to {interval}ms")

    @property
    def name(self) -> Optional[str]:
        return self._name

    @name.setter
    def name(self, value: Optional[str]):
        if self._disposed:
            raise create_disposed_error("rename", self._name)
        old, self._name = self._name, value
        if old != value:
            # The armed gauge follows the metrics label
            metrics.set_armed(old, False)
            metrics.set_armed(value, self._enabled)

    @property
    def enabled(self) -> bool:
        """True while armed."""
        return self._enabled

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def state(self) -> PollerState:
        if self._disposed:
            return PollerState.DISPOSED
        if self._enabled:
            return PollerState.ARMED
        return PollerState.CREATED

    @property
    def is_busy(self) -> bool:
        """True while a do_work invocation is in flight."""
        return self._dispatch_task is not None and not self._dispatch_task.done()

    @property
    def stats(self) -> PollerStats:
        return self._stats

    @property
    def _label(self) -> str:
        return repr(self._name) if self._name else type(self).__name__

    # --- Control ---

    def start_timer(self):
        """
        Arm the clock. Idempotent.

        Raises:
            PollerDisposedError: If the poller was disposed
            ClockError: If no event loop is available to run the clock
        """
        if self._disposed:
            raise create_disposed_error("start", self._name)
        if self._enabled:
            return

        self._clock.arm()
        self._enabled = True
        metrics.set_armed(self._name, True)
        logger.info(f"🕒 Poller {self._label} started (Interval: {self._interval}ms)")

    def stop_timer(self):
        """
        Disarm the clock. Idempotent.

        An in-flight do_work is not interrupted. The poller can be
        started again.

        Raises:
            PollerDisposedError: If the poller was disposed
        """
        if self._disposed:
            raise create_disposed_error("stop", self._name)
        if not self._enabled:
            return

        self._enabled = False
        self._clock.disarm()
        metrics.set_armed(self._name, False)
        logger.info(f"🛑 Poller {self._label} stopped")

    def do_work(self, sender: Any, tick: TickEvent):
        """
        Work performed on each tick.

        The default delegates to the handler given at construction.
        Subclasses may override it instead of passing a handler.
        """
        if self._work is None:
            raise NotImplementedError(f"{type(self).__name__} has no handler")
        return self._work(sender, tick)

    def dispose(self):
        """
        Stop ticking and release the clock. Terminal and idempotent.

        No tick is dispatched after this returns. An in-flight do_work is
        left to finish; use aclose() to wait for it.
        """
        if self._disposed:
            return

        self._disposed = True
        self._enabled = False
        clock, self._clock = self._clock, None
        if clock is not None:
            clock.close()
        metrics.set_armed(self._name, False)
        logger.info(f"🧹 Poller {self._label} disposed")

    async def aclose(self, timeout: Optional[float] = None):
        """
        Dispose, then wait for an in-flight do_work to finish.

        Args:
            timeout: Max seconds to wait before cancelling the in-flight
                work (None = config CLOSE_TIMEOUT_SECONDS)

        Coroutine work is cancelled on timeout. Plain (sync) work cannot be
        interrupted: its worker thread is abandoned and runs to completion
        on its own, while the poller already reports not busy.
        """
        self.dispose()

        task = self._dispatch_task
        if task is None or task.done() or task is asyncio.current_task():
            return

        if timeout is None:
            timeout = polling_config.CLOSE_TIMEOUT_SECONDS

        try:
            await asyncio.wait_for(asyncio.shield(task), timeout=timeout)
        except asyncio.TimeoutError:
            if inspect.iscoroutinefunction(self._target):
                logger.warning(f"⚠️ Poller {self._label}: work did not finish in {timeout}s, cancelling")
            else:
                logger.warning(
                    f"⚠️ Poller {self._label}: work did not finish in {timeout}s, "
                    f"abandoning its worker thread (sync work cannot be interrupted)"
                )
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    # --- Tick dispatch ---

    def _on_elapsed(self, tick: TickEvent):
        """Clock callback. Runs on the event loop."""
        if self._disposed or not self._enabled:
            return

        self._stats.ticks_received += 1
        self._stats.last_tick_at = tick.timestamp

        if self.is_busy:
            self._stats.ticks_skipped += 1
            metrics.record_skipped_tick(self._name)
            logger.debug(f"⏭️ Poller {self._label}: tick #{tick.sequence} skipped, previous work still running")
            return

        self._dispatch_task = asyncio.get_running_loop().create_task(
            self._dispatch(tick), name=f"{self._name or type(self).__name__}-work"
        )

    async def _dispatch(self, tick: TickEvent):
        # Disposed between the tick and this task starting
        if self._disposed:
            return

        self._stats.ticks_dispatched += 1
        logger.debug(f"▶️ Poller {self._label}: tick #{tick.sequence}")
        started = time.perf_counter()
        try:
            if inspect.iscoroutinefunction(self._target):
                await self._target(self, tick)
            else:
                result = await asyncio.to_thread(self._target, self, tick)
                if inspect.isawaitable(result):
                    await result
        except asyncio.CancelledError:
            raise
        except Exception as e:
            await self._report_error(e)
        finally:
            metrics.record_tick(self._name, time.perf_counter() - started)

    async def _report_error(self, error: Exception):
        self._stats.errors += 1
        self._stats.last_error = f"{type(error).__name__}: {error}"
        metrics.record_tick_error(self._name, error)
        logger.error(f"💥 Error in Poller {self._label}.do_work(): {error}", exc_info=error)

        if self._on_error is None:
            return
        try:
            result = self._on_error(self, error)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"❌ Error reporter failed for Poller {self._label}: {e}")

    # --- Scoped acquisition ---

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose()
        return False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
        return False

    def __del__(self):
        # Cleanup is never left to the garbage collector; only warn.
        if not getattr(self, "_disposed", True):
            warnings.warn(f"Poller {self._label} was never disposed", ResourceWarning, source=self)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self._name!r} state={self.state.value} interval={self._interval}ms>"
