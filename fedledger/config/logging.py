"""Per-component loggers for the gateway, contract and ledger.

Every component asks for its logger through :func:`get_logger`. Level,
console format and the optional per-component JSON file come from
:class:`~fedledger.config.settings.Settings`; :func:`configure_logging`
swaps those settings at runtime (the CLI does this once it has parsed its
flags).
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, MutableMapping

from fedledger.config.settings import Settings, get_settings

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_DATEFMT = "%Y-%m-%d %H:%M:%S"

LEVEL_COLORS: dict[int, str] = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}
RESET = "\033[0m"

_active_settings: Settings | None = None
_logger_names: set[str] = set()


def _colorize(text: str, levelno: int) -> str:
    return f"{LEVEL_COLORS.get(levelno, RESET)}{text}{RESET}"


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors level and message by severity."""

    def format(self, record: logging.LogRecord) -> str:
        if record.exc_info:
            return super().format(record)
        # Other handlers share the record, so color a copy.
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = _colorize(record.levelname, record.levelno)
        colored.msg = _colorize(record.getMessage(), record.levelno)
        colored.args = None
        return super().format(colored)


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with adapter context as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        context = getattr(record, "context", None)
        if isinstance(context, Mapping):
            entry.update(context)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _console_handler(json_output: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        JSONFormatter()
        if json_output
        else ColoredFormatter(fmt=CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT)
    )
    return handler


def _file_handler(log_file: Path) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file)
    handler.setFormatter(JSONFormatter())
    return handler


@lru_cache()
def setup_logging(
    name: str,
    level: int | str = logging.INFO,
    json_output: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Replace the handlers of logger ``name``.

    Cached per argument set, so repeated lookups leave handlers alone.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_console_handler(json_output))
    if log_file is not None:
        logger.addHandler(_file_handler(log_file))
    return logger


class LoggerAdapter(logging.LoggerAdapter):
    """Appends ``key=value`` context to messages and JSON entries."""

    extra: Mapping[str, Any]

    def __init__(
        self, logger: logging.Logger, context: dict[str, Any]
    ) -> None:
        super().__init__(logger, context)
        self.extra = context

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        pairs = " ".join(f"{k}={v}" for k, v in self.extra.items())
        kwargs.setdefault("extra", {})["context"] = dict(self.extra)
        return f"{msg} [{pairs}]", kwargs


def get_logger(
    name: str, context: dict[str, Any] | None = None
) -> logging.Logger | LoggerAdapter:
    """Get a logger with optional context."""
    settings = _active_settings or get_settings()
    _logger_names.add(name)
    logger = setup_logging(
        name,
        level=settings.log_level,
        json_output=settings.json_logs,
        log_file=(
            settings.log_dir / f"{name}.log" if settings.log_dir else None
        ),
    )
    return LoggerAdapter(logger, context) if context else logger


def configure_logging(settings: Settings) -> None:
    """Apply settings to every logger handed out so far and later."""
    global _active_settings
    _active_settings = settings
    setup_logging.cache_clear()
    for name in sorted(_logger_names):
        get_logger(name)
