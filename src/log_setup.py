"""Logging setup for twitchbuzz.

Driven by the "logging" section of config.json. Secret values named in
``redact.patterns`` are read from the environment and masked in every
handler, since chat ids, bot tokens and OAuth tokens can end up in tracebacks.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Mapping, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LOG_PATH = "logs/twitchbuzz.log"


class RedactingFormatter(logging.Formatter):
    """Formatter that replaces known secret values with ``***``."""

    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        # Longest first so a token containing another secret is fully masked.
        self._secrets = sorted({s for s in secrets if s}, key=len, reverse=True)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def redaction_values(config: Mapping, environ: Optional[Mapping[str, str]] = None) -> list[str]:
    """Return the environment values that must never appear in logs."""

    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    environ = os.environ if environ is None else environ
    return [environ[name] for name in redact_cfg.get("patterns", []) if environ.get(name)]


def _file_handler(file_cfg: Mapping, project_root: str) -> RotatingFileHandler:
    path = file_cfg.get("path", DEFAULT_LOG_PATH)
    if not os.path.isabs(path):
        path = os.path.join(project_root, path)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
        backupCount=int(file_cfg.get("backup_count", 5)),
        encoding="utf-8",
    )


def build_handlers(config: Mapping, project_root: str) -> list[logging.Handler]:
    """Create the console and rotating-file handlers the config asks for."""

    level = getattr(logging, str(config.get("level", "INFO")).upper(), logging.INFO)
    formatter = RedactingFormatter(redaction_values(config), fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = []
    if config.get("console", True):
        handlers.append(logging.StreamHandler())
    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        handlers.append(_file_handler(file_cfg, project_root))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def configure_logging(config: Optional[Mapping], project_root: str) -> bool:
    """Install root handlers; returns False when logging is disabled."""

    config = config or {}
    if not config.get("enabled", False):
        return False
    handlers = build_handlers(config, project_root)
    if not handlers:
        return False
    level = getattr(logging, str(config.get("level", "INFO")).upper(), logging.INFO)
    logging.basicConfig(level=level, handlers=handlers)
    return True
