"""
Tests for structured logging configuration and poller metrics.
"""

import asyncio
import json
import logging

import pytest
import structlog
from prometheus_client import REGISTRY

from config import polling as polling_config
from polling import Poller
from polling.observability import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)


def sample(name, **labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestLogging:
    """Tests for configure_logging and context helpers."""

    @pytest.fixture(autouse=True)
    def restore_logging(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        clear_context()
        structlog.reset_defaults()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_json_output_includes_bound_context(self, capsys):
        configure_logging(log_level="DEBUG", log_format="json")
        bind_context(poller="inbox")

        get_logger("polling.test").info("poller_started", interval=5000)

        line = capsys.readouterr().out.strip().splitlines()[-1]
        payload = json.loads(line[line.index("{") :])
        assert payload["event"] == "poller_started"
        assert payload["poller"] == "inbox"
        assert payload["interval"] == 5000
        assert payload["level"] == "info"

    def test_unbind_context(self, capsys):
        configure_logging(log_level="INFO", log_format="json")
        bind_context(poller="inbox", attempt=1)
        unbind_context("attempt")

        get_logger("polling.test").warning("tick_skipped")

        out = capsys.readouterr().out
        assert '"poller": "inbox"' in out
        assert "attempt" not in out

    def test_level_filters_debug(self, capsys):
        configure_logging(log_level="WARNING", log_format="console")

        get_logger("polling.test").debug("hidden_event")

        assert "hidden_event" not in capsys.readouterr().out

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "poller.log"
        configure_logging(log_level="INFO", log_format="json", log_file=str(log_file))

        get_logger("polling.test").info("written_to_file")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "written_to_file" in log_file.read_text()


class TestMetrics:
    """Poller activity is exported through prometheus_client."""

    @pytest.mark.asyncio
    async def test_ticks_and_armed_gauge(self):
        before = sample("poller_ticks_total", poller="metrics-ticks")

        poller = Poller(lambda sender, tick: None, interval=10, name="metrics-ticks")
        poller.start_timer()
        assert sample("poller_armed", poller="metrics-ticks") == 1.0

        await asyncio.sleep(0.05)
        await poller.aclose()

        assert sample("poller_ticks_total", poller="metrics-ticks") - before >= 2
        assert sample("poller_armed", poller="metrics-ticks") == 0.0

    @pytest.mark.asyncio
    async def test_errors_and_skips(self):
        async def slow_failure(sender, tick):
            await asyncio.sleep(0.03)
            raise KeyError("missing")

        poller = Poller(slow_failure, interval=10, name="metrics-errors")
        poller.start_timer()
        await asyncio.sleep(0.1)
        await poller.aclose()

        assert sample("poller_tick_errors_total", poller="metrics-errors", error_type="KeyError") >= 1
        assert sample("poller_ticks_skipped_total", poller="metrics-errors") >= 1

    @pytest.mark.asyncio
    async def test_rename_moves_armed_gauge(self):
        poller = Poller(lambda sender, tick: None, interval=1000, name="metrics-old")
        poller.start_timer()
        assert sample("poller_armed", poller="metrics-old") == 1.0

        poller.name = "metrics-new"

        assert sample("poller_armed", poller="metrics-old") == 0.0
        assert sample("poller_armed", poller="metrics-new") == 1.0
        poller.dispose()
        assert sample("poller_armed", poller="metrics-new") == 0.0

    @pytest.mark.asyncio
    async def test_disabled_metrics_record_nothing(self, monkeypatch):
        monkeypatch.setattr(polling_config, "METRICS_ENABLED", False)

        poller = Poller(lambda sender, tick: None, interval=10, name="metrics-disabled")
        poller.start_timer()
        await asyncio.sleep(0.04)
        await poller.aclose()

        assert sample("poller_ticks_total", poller="metrics-disabled") == 0.0
        assert sample("poller_armed", poller="metrics-disabled") == 0.0
