from typing import Any, Awaitable, Callable, Optional, Protocol, Union, runtime_checkable

from polling.events import TickEvent


@runtime_checkable
class TickHandler(Protocol):
    """
    Capability interface for anything a poller can drive.

    A handler only has to provide ``do_work``. It may be a coroutine
    function (awaited on the event loop) or a plain function (run in a
    worker thread so blocking work does not stall the clock).
    """

    def do_work(self, sender: Any, tick: TickEvent) -> Optional[Awaitable[None]]:
        """
        Called once per dispatched tick.

        Args:
            sender: The poller that dispatched the tick.
            tick: Arguments of the current tick.
        """
        ...


# Plain callables with the same signature are accepted in place of a handler.
WorkCallable = Callable[[Any, TickEvent], Optional[Awaitable[None]]]

# Receives work failures: (poller, exception).
ErrorReporter = Callable[[Any, BaseException], Optional[Awaitable[None]]]

HandlerLike = Union[TickHandler, WorkCallable]
