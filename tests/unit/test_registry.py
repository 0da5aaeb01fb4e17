import asyncio

import pytest

from polling import Poller, PollerDisposedError, PollerRegistry, PollerState


async def noop(sender, tick):
    pass


class TestPollerRegistry:
    """Tests for the explicit poller owner."""

    @pytest.fixture
    def registry(self):
        registry = PollerRegistry()
        yield registry
        registry.dispose_all()

    def test_register_is_idempotent(self, registry):
        poller = Poller(noop, name="inbox")

        assert registry.register(poller) is poller
        registry.register(poller)

        assert len(registry) == 1
        assert poller in registry

    def test_unregister_does_not_dispose(self, registry):
        poller = Poller(noop)
        registry.register(poller)

        registry.unregister(poller)
        registry.unregister(poller)

        assert len(registry) == 0
        assert not poller.disposed
        poller.dispose()

    def test_register_disposed_poller_raises(self, registry):
        poller = Poller(noop)
        poller.dispose()

        with pytest.raises(PollerDisposedError):
            registry.register(poller)

    @pytest.mark.asyncio
    async def test_dispose_all(self, registry):
        pollers = [registry.register(Poller(noop, interval=10, name=f"p{i}")) for i in range(3)]
        for poller in pollers:
            poller.start_timer()

        registry.dispose_all()
        registry.dispose_all()

        assert len(registry) == 0
        assert all(p.state == PollerState.DISPOSED for p in pollers)

    @pytest.mark.asyncio
    async def test_aclose_all_waits_for_work(self):
        done = []

        async def slow(sender, tick):
            await asyncio.sleep(0.05)
            done.append(sender.name)

        async with PollerRegistry() as registry:
            for name in ("a", "b"):
                registry.register(Poller(slow, interval=10, name=name)).start_timer()
            await asyncio.sleep(0.02)
            pollers = list(registry)

        assert sorted(done) == ["a", "b"]
        assert all(p.disposed for p in pollers)
        assert all(not p.is_busy for p in pollers)

    def test_sync_context_manager(self):
        with PollerRegistry() as registry:
            poller = registry.register(Poller(noop))
        assert poller.disposed

    def test_get_status(self, registry):
        registry.register(Poller(noop, interval=250, name="inbox"))
        registry.register(Poller(noop))

        status = registry.get_status()

        assert status["inbox"]["state"] == "created"
        assert status["inbox"]["interval"] == 250.0
        assert status["inbox"]["ticks_dispatched"] == 0
        assert "Poller#1" in status

    def test_get_status_keeps_pollers_sharing_a_name(self, registry):
        registry.register(Poller(noop, interval=100, name="inbox"))
        registry.register(Poller(noop, interval=200, name="inbox"))

        status = registry.get_status()

        assert len(status) == 2
        assert status["inbox"]["interval"] == 100.0
        assert status["inbox#1"]["interval"] == 200.0
