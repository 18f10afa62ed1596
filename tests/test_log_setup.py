from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from log_setup import RedactingFormatter, build_handlers, configure_logging, redaction_values


def _record(message: str) -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, __file__, 1, message, None, None)


def test_formatter_masks_secrets_longest_first() -> None:
    formatter = RedactingFormatter(["abc", "abc123", ""], fmt="%(message)s")

    assert formatter.format(_record("token=abc123 short=abc")) == "token=*** short=***"


def test_redaction_values_read_named_environment_values() -> None:
    config = {"redact": {"enabled": True, "patterns": ["BOT_TOKEN", "MISSING", "EMPTY"]}}
    environ = {"BOT_TOKEN": "123:secret", "EMPTY": ""}

    assert redaction_values(config, environ) == ["123:secret"]
    assert redaction_values({"redact": {"enabled": False, "patterns": ["BOT_TOKEN"]}}, environ) == []
    assert redaction_values({}, environ) == []


def test_build_handlers_creates_rotating_file_under_project_root(tmp_path) -> None:
    config = {
        "level": "debug",
        "console": False,
        "file": {"enabled": True, "path": "logs/app.log", "max_bytes": 1024, "backup_count": 2},
    }

    handlers = build_handlers(config, str(tmp_path))
    try:
        assert len(handlers) == 1
        handler = handlers[0]
        assert isinstance(handler, RotatingFileHandler)
        assert handler.level == logging.DEBUG
        assert handler.baseFilename == str(tmp_path / "logs" / "app.log")
        assert (tmp_path / "logs").is_dir()
    finally:
        for handler in handlers:
            handler.close()


def test_configure_logging_disabled_is_noop(tmp_path) -> None:
    assert configure_logging(None, str(tmp_path)) is False
    assert configure_logging({"enabled": False}, str(tmp_path)) is False
    assert configure_logging({"enabled": True, "console": False}, str(tmp_path)) is False
