import json
import logging

from sahay.libs.logging_utils import ColorTextFormatter, JsonFormatter, configure_logging
from sahay.libs.schemas.settings import AppSettings


def _record(level=logging.WARNING):
    return logging.LogRecord("sahay.test", level, __file__, 1, "[telemetry] %s", ("GET /health",), None)


def test_json_formatter_merges_extra_fields():
    record = _record()
    record.status = 200
    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "[telemetry] GET /health"
    assert payload["level"] == "WARNING"
    assert payload["logger"] == "sahay.test"
    assert payload["status"] == 200


def test_color_formatter_only_colours_when_enabled():
    assert ColorTextFormatter("%(message)s", color=True).format(_record()) == "\033[33m[telemetry] GET /health\033[0m"
    assert ColorTextFormatter("%(message)s").format(_record()) == "[telemetry] GET /health"
    assert ColorTextFormatter("%(message)s", color=True).format(_record(logging.INFO)) == "[telemetry] GET /health"


def test_configure_logging_sets_root_level():
    configure_logging("warning", "text")
    assert logging.getLogger().level == logging.WARNING
    configure_logging("debug", "json")
    assert logging.getLogger().level == logging.DEBUG


def test_configure_logging_defaults_follow_settings():
    settings = AppSettings(environment="production", log_format="text", log_color="yes")
    configure_logging(
        settings.log_level, settings.log_format, environment=settings.environment, color=settings.log_color
    )
    root = logging.getLogger()
    assert root.level == logging.INFO
    formatter = next(h.formatter for h in root.handlers if isinstance(h.formatter, ColorTextFormatter))
    assert formatter.color is True

    configure_logging(None, "text", environment="test")
    assert logging.getLogger().level == logging.DEBUG
