import asyncio
import logging
from typing import Any, Dict, Iterator, List, Optional

from polling.exceptions import create_disposed_error
from polling.poller import Poller

logger = logging.getLogger("PollerRegistry")


class PollerRegistry:
    """
    Explicit owner for pollers.

    Components register the pollers they create; on shutdown the owner
    disposes all of them. It does not order or coordinate their ticks.

    Example:
        registry = PollerRegistry()
        registry.register(Poller(check_inbox, interval=5000, name="inbox"))
        ...
        await registry.aclose_all()
    """

    def __init__(self):
        self._pollers: List[Poller] = []

    def register(self, poller: Poller) -> Poller:
        """Take ownership of a poller. Registering twice is a no-op."""
        if poller.disposed:
            raise create_disposed_error("register", poller.name)
        if poller not in self._pollers:
            self._pollers.append(poller)
            logger.info(f"➕ Poller registered: {poller.name or type(poller).__name__}")
        return poller

    def unregister(self, poller: Poller):
        """Release ownership without disposing."""
        if poller in self._pollers:
            self._pollers.remove(poller)
        # Silent if not found (idempotent)

    def dispose_all(self):
        """Dispose every registered poller and forget them."""
        pollers, self._pollers = self._pollers, []
        for poller in pollers:
            try:
                poller.dispose()
            except Exception as e:
                logger.error(f"❌ Failed to dispose {poller!r}: {e}", exc_info=True)
        if pollers:
            logger.info(f"🧹 Disposed {len(pollers)} poller(s)")

    async def aclose_all(self, timeout: Optional[float] = None):
        """Dispose every poller, then wait for their in-flight work."""
        pollers, self._pollers = self._pollers, []
        results = await asyncio.gather(*(p.aclose(timeout=timeout) for p in pollers), return_exceptions=True)
        for poller, result in zip(pollers, results):
            if isinstance(result, Exception):
                logger.error(f"❌ Failed to close {poller!r}: {result}")
        if pollers:
            logger.info(f"🧹 Closed {len(pollers)} poller(s)")

    def get_status(self) -> Dict[str, Dict[str, Any]]:
        """Return a report of all registered pollers, keyed by name."""
        report = {}
        for index, poller in enumerate(self._pollers):
            key = poller.name or type(poller).__name__
            if key in report or not poller.name:
                # Names are not unique
                key = f"{key}#{index}"
            report[key] = {
                "state": poller.state.value,
                "interval": poller.interval,
                "busy": poller.is_busy,
                **poller.stats.to_dict(),
            }
        return report

    def __len__(self) -> int:
        return len(self._pollers)

    def __iter__(self) -> Iterator[Poller]:
        return iter(list(self._pollers))

    def __contains__(self, poller) -> bool:
        return poller in self._pollers

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose_all()
        return False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose_all()
        return False
