"""
Structured JSON logger for the atlas.

Each logger writes JSON lines to ``<paths.logs_dir>/<name>.jsonl`` and,
optionally, plain lines to stdout.  Atlas context passed through ``extra``
(query, fit generation, display mode, counts) is kept as typed JSON fields
under ``"atlas"`` instead of being flattened into the message:

    logger.debug("Fit issued", extra=atlas_context(generation=3, matched=2))

Levels come from ``logging.console_level`` / ``logging.file_level``.
"""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

# Record attributes copied into the "atlas" object of a JSON line.
ATLAS_FIELDS = (
    "query",
    "matched",
    "nodes",
    "edges",
    "generation",
    "fit_all",
    "heatmap",
    "voidstones",
    "map_name",
    "fullscreen",
)

_DEFAULTS = {
    "logs_dir": "logs",
    "console_level": "INFO",
    "file_level": "DEBUG",
}
_MAX_BYTES = 10 * 1024 * 1024
_BACKUP_COUNT = 5
_CONSOLE_FMT = "%(asctime)s | %(name)-24s | %(levelname)-7s | %(message)s"

_settings: Optional[Dict[str, Any]] = None


def atlas_context(**fields: Any) -> Dict[str, Any]:
    """
    ``extra`` mapping for a log call.  Unknown keys raise so a typo cannot
    silently drop a field.
    """
    unknown = set(fields) - set(ATLAS_FIELDS)
    if unknown:
        raise KeyError(f"Unknown atlas log fields: {sorted(unknown)}")
    return fields


class JsonFormatter(logging.Formatter):
    """One JSON object per record, atlas context nested under ``"atlas"``."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "line": record.lineno,
        }
        context = {
            key: getattr(record, key) for key in ATLAS_FIELDS if hasattr(record, key)
        }
        if context:
            entry["atlas"] = context
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def parse_level(value: Any, fallback: int) -> int:
    """``"debug"``, ``"INFO"``, ``10`` -> logging level; anything else -> *fallback*."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        level = logging.getLevelName(value.strip().upper())
        if isinstance(level, int):
            return level
    return fallback


def _read_settings() -> Dict[str, Any]:
    # config.json is read here directly: atlas_core.config logs through this module.
    global _settings
    if _settings is not None:
        return _settings

    settings = dict(_DEFAULTS)
    config_file = Path("config.json")
    if config_file.exists():
        try:
            with open(config_file, "r") as fh:
                data = json.load(fh)
            paths = data.get("paths") or {}
            levels = data.get("logging") or {}
            settings["logs_dir"] = paths.get("logs_dir") or settings["logs_dir"]
            settings["console_level"] = levels.get("console_level", settings["console_level"])
            settings["file_level"] = levels.get("file_level", settings["file_level"])
        except (OSError, ValueError, AttributeError):
            settings = dict(_DEFAULTS)

    log_dir = Path(settings["logs_dir"])
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        log_dir = Path(_DEFAULTS["logs_dir"])
        log_dir.mkdir(parents=True, exist_ok=True)
    settings["logs_dir"] = log_dir

    _settings = settings
    return _settings


def get_logger(name: str, *, console: bool = True) -> logging.Logger:
    """
    Logger with a JSON-lines file handler and, if *console*, a stdout handler.

    Repeated calls with the same *name* return the configured logger as-is.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    settings = _read_settings()
    file_level = parse_level(settings["file_level"], logging.DEBUG)
    console_level = parse_level(settings["console_level"], logging.INFO)

    logger.setLevel(min(file_level, console_level) if console else file_level)
    logger.propagate = False

    file_handler = RotatingFileHandler(
        settings["logs_dir"] / f"{name}.jsonl",
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(JsonFormatter())
    logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(console_level)
        console_handler.setFormatter(logging.Formatter(_CONSOLE_FMT))
        logger.addHandler(console_handler)

    return logger
