"""
Tests for logging, timing and evaluation tracing.

Tests:
- Module to category routing
- JSON and console formatting
- log_timing / timed level escalation
- Evaluation ID scoping
"""

import json
import logging
from typing import List

import pytest

from chartengine.utils.logging_setup import (
    ConsoleFormatter,
    JSONFormatter,
    get_category_for_module,
    get_debug_logger,
    get_logger,
    setup_logging,
    shutdown_logging,
)
from chartengine.utils.perf_logger import get_perf_logger, log_timing, set_perf_logger, timed
from chartengine.utils.trace_context import (
    get_evaluation_counter,
    get_evaluation_id,
    new_evaluation,
    reset_evaluation_counter,
)
from config.models import LoggingConfig


class ListHandler(logging.Handler):
    """Collects records for assertions."""

    def __init__(self) -> None:
        super().__init__()
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture
def perf_records():
    """Route perf logs into a list."""
    logger = logging.getLogger("test.perf")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    handler = ListHandler()
    logger.addHandler(handler)
    original = get_perf_logger()
    set_perf_logger(logger)
    yield handler.records
    set_perf_logger(original)
    logger.removeHandler(handler)


class TestRouting:
    """Tests for get_category_for_module() / get_logger()."""

    @pytest.mark.parametrize(
        "module,category",
        [
            ("chartengine.domain.indicators.trend.ema", "indicators"),
            ("chartengine.domain.series.window", "indicators"),
            ("chartengine.domain.trends.finder", "trends"),
            ("chartengine.domain.patterns.double_peak", "patterns"),
            ("chartengine.utils.perf_logger", "perf"),
            ("config.config_manager", "system"),
            ("somewhere.else", "system"),
        ],
    )
    def test_category(self, module: str, category: str) -> None:
        assert get_category_for_module(module) == category

    def test_logger_name(self) -> None:
        assert get_logger("chartengine.domain.trends.hits").name == "chartengine.trends"

    def test_debug_logger(self) -> None:
        logger = get_debug_logger("trends", "hits")
        assert logger.name == "chartengine.trends.hits"
        assert logger.level == logging.DEBUG


class TestFormatters:
    """Tests for JSONFormatter and ConsoleFormatter."""

    def _record(self, name: str = "chartengine.trends") -> logging.LogRecord:
        return logging.LogRecord(name, logging.INFO, __file__, 1, "scored %d lines", (3,), None)

    def test_json(self) -> None:
        record = self._record()
        record.data = {"candidates": 3}
        with new_evaluation() as evaluation_id:
            entry = json.loads(JSONFormatter().format(record))
        assert entry["level"] == "INFO"
        assert entry["cat"] == "trends"
        assert entry["eval"] == evaluation_id
        assert entry["msg"] == "scored 3 lines"
        assert entry["data"] == {"candidates": 3}

    def test_json_unknown_category(self) -> None:
        entry = json.loads(JSONFormatter().format(self._record("other.logger")))
        assert entry["cat"] == "system"
        assert entry["eval"] == "------"

    def test_console_without_colors(self) -> None:
        line = ConsoleFormatter(use_colors=False).format(self._record())
        assert line == "[INFO   ] [------] scored 3 lines"


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_category_levels(self) -> None:
        try:
            root = setup_logging(LoggingConfig(level="DEBUG", json=True, category_levels={"perf": "ERROR"}))
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, JSONFormatter)
            assert logging.getLogger("chartengine.perf").level == logging.ERROR
        finally:
            shutdown_logging()
            logging.getLogger("chartengine").propagate = True
            logging.getLogger("chartengine.perf").setLevel(logging.NOTSET)
        assert logging.getLogger("chartengine").handlers == []


class TestTiming:
    """Tests for log_timing() and timed()."""

    def test_fast_operation_logs_debug(self, perf_records: List[logging.LogRecord]) -> None:
        with log_timing("enumerate", extra={"side": "low"}) as ctx:
            ctx["candidates"] = 6

        assert len(perf_records) == 1
        record = perf_records[0]
        assert record.levelno == logging.DEBUG
        assert record.data["operation"] == "enumerate"
        assert record.data["side"] == "low"
        assert record.data["candidates"] == 6

    def test_slow_operation_escalates(self, perf_records: List[logging.LogRecord]) -> None:
        with log_timing("score", warn_threshold_ms=-1.0, error_threshold_ms=1e9):
            pass
        with log_timing("score", warn_threshold_ms=-1.0, error_threshold_ms=-1.0):
            pass
        assert [r.levelno for r in perf_records] == [logging.WARNING, logging.ERROR]

    def test_logs_when_body_raises(self, perf_records: List[logging.LogRecord]) -> None:
        with pytest.raises(ValueError):
            with log_timing("failing"):
                raise ValueError("boom")
        assert len(perf_records) == 1

    def test_timed_decorator(self, perf_records: List[logging.LogRecord]) -> None:
        @timed()
        def measure(x: int) -> int:
            return x * 2

        assert measure(4) == 8
        assert measure.__name__ == "measure"
        assert perf_records[0].data["operation"] == "measure"


class TestTraceContext:
    """Tests for evaluation IDs."""

    def test_scoping(self) -> None:
        reset_evaluation_counter()
        assert get_evaluation_id() == "------"
        with new_evaluation() as outer:
            assert len(outer) == 6
            assert get_evaluation_id() == outer
            with new_evaluation() as inner:
                assert get_evaluation_id() == inner
            assert get_evaluation_id() == outer
        assert get_evaluation_id() == "------"
        assert get_evaluation_counter() == 2
