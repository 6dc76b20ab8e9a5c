"""Test structured logger output."""

import io
import json

from sixstroke.core.logging import StructuredLogger, get_logger, set_log_level, set_log_output


def test_records_are_json_lines():
    buf = io.StringIO()
    logger = StructuredLogger("test", output=buf)
    logger.info("upgrade applied", upgrade="turbocharger")

    record = json.loads(buf.getvalue())
    assert record["level"] == "INFO"
    assert record["message"] == "upgrade applied"
    assert record["logger"] == "test"
    assert record["upgrade"] == "turbocharger"


def test_min_level_filters():
    buf = io.StringIO()
    logger = StructuredLogger("test", output=buf, min_level="WARN")
    logger.debug("hidden")
    logger.info("hidden")
    logger.warn("shown")
    lines = buf.getvalue().splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["level"] == "WARN"


def test_timer_logs_elapsed_at_debug():
    buf = io.StringIO()
    logger = StructuredLogger("test", output=buf, min_level="DEBUG")
    with logger.timer("tick"):
        pass
    record = json.loads(buf.getvalue())
    assert record["message"] == "tick completed"
    assert record["elapsed_ms"] >= 0.0


def test_global_output_redirect():
    buf = io.StringIO()
    logger = get_logger("sixstroke.tests.redirect")
    set_log_output(buf)
    try:
        set_log_level("INFO")
        logger.info("redirected")
    finally:
        set_log_output(None)
    assert "redirected" in buf.getvalue()


def test_set_log_level_applies_to_cached_loggers():
    buf = io.StringIO()
    logger = get_logger("sixstroke.tests.level")
    set_log_output(buf)
    try:
        set_log_level("ERROR")
        logger.warn("suppressed")
        set_log_level("INFO")
        logger.warn("emitted")
    finally:
        set_log_output(None)
    assert "suppressed" not in buf.getvalue()
    assert "emitted" in buf.getvalue()
