"""Test logging setup.

Tests for wirefit.utils.logging_config:
    - File output carries logger name and pushed context
    - Repeated setup_logging() replaces handlers instead of stacking them
    - pop_context() removes fields
    - Unknown level rejected

Run:
    pytest tests/test_logging_config.py -v
"""

import contextlib
import io
import logging

import pytest

from wirefit.utils import logging_config


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logging_config.pop_context()
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()


def test_logging_idempotency(tmp_path):
    """File output and idempotent reconfiguration."""
    log_path = tmp_path / "logs" / "test.log"

    errbuf = io.StringIO()
    with contextlib.redirect_stderr(errbuf):
        first = logging_config.setup_logging("INFO", str(log_path), context={"app": "test"})
        logger = logging_config.get_logger("wirefit_test")
        logger.info("hello")

        second = logging_config.setup_logging("INFO", str(log_path), context={"app": "test"})
        logger.info("world")

    assert len(first) == len(second) == 2
    assert all(h not in logging.getLogger().handlers for h in first)

    lines = log_path.read_text().strip().splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("| wirefit_test | app=test | hello")
    assert lines[1].endswith("world")


def test_pop_context_removes_fields(tmp_path):
    log_path = tmp_path / "ctx.log"
    with contextlib.redirect_stderr(io.StringIO()):
        logging_config.setup_logging(log_file=str(log_path))
        logger = logging_config.get_logger("wirefit_test")

        logging_config.push_context(episode=3, run_id="a1")
        logger.info("tagged")
        logging_config.pop_context(keys=["episode"])
        logger.info("untagged")

    first, second = log_path.read_text().strip().splitlines()
    assert "episode=3 run_id=a1 | tagged" in first
    assert "episode" not in second
    assert "run_id=a1 | untagged" in second


def test_format_without_context():
    logging_config.pop_context()
    formatter = logging_config.ContextFormatter()
    record = logging.LogRecord("wirefit.x", logging.WARNING, __file__, 1, "cap %d", (3,), None)

    fields = formatter.format(record).split(" | ")
    assert fields[0].endswith("Z")
    assert fields[1].strip() == "WARNING"
    assert fields[2:] == ["wirefit.x", "cap 3"]


def test_debug_level_filters(tmp_path):
    log_path = tmp_path / "lvl.log"
    with contextlib.redirect_stderr(io.StringIO()):
        logging_config.setup_logging("WARNING", str(log_path))
        logger = logging_config.get_logger("wirefit_test")
        logger.info("hidden")
        logger.warning("shown")

    assert log_path.read_text().strip().endswith("shown")
    assert "hidden" not in log_path.read_text()


def test_unknown_level_rejected():
    with pytest.raises(ValueError, match="log level"):
        logging_config.setup_logging("LOUD")
