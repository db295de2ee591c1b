"""Structured event logging for game services.

Events are rendered as one line of key=value pairs (or a compact JSON object
when ALLEY_LOG_JSON is set) and handed to the stdlib logger of the same name,
so they reach whatever handlers the server configured:

    from alley.logging_utils import get_logger
    log = get_logger("alley.seeder")
    log.info(event="map_seeded", map_id=3, name="map_3")

    level=info ts=1760880000 event=map_seeded map_id=3 name=map_3 logger=alley.seeder

Fields whose value is None are dropped. Reserved keys: level, ts.
"""

from __future__ import annotations

import json
import logging
import os
import time

LEVELS = {"debug": logging.DEBUG, "info": logging.INFO, "warn": logging.WARNING, "error": logging.ERROR}
CURRENT_LEVEL = LEVELS.get(os.getenv("ALLEY_LOG_LEVEL", "info"), logging.INFO)
JSON_MODE = os.getenv("ALLEY_LOG_JSON", "0") in ("1", "true", "TRUE", "yes", "on")


def format_event(level: str, **fields) -> str:
    if JSON_MODE:
        rec = {k: v for k, v in fields.items() if v is not None}
        rec["level"] = level
        rec["ts"] = int(time.time())
        return json.dumps(rec, separators=(",", ":"), default=str)
    parts = [f"level={level}", f"ts={int(time.time())}"]
    for k, v in fields.items():
        if v is None:
            continue
        if isinstance(v, (int, float)):
            parts.append(f"{k}={v}")
        else:
            parts.append(f"{k}={str(v).replace(' ', '_')}")
    return " ".join(parts)


class EventLogger:
    """Keyword-only facade over `logging.getLogger(name)`."""

    def __init__(self, name: str):
        self.name = name
        self._logger = logging.getLogger(name)

    def _log(self, lvl: str, **fields):
        level = LEVELS[lvl]
        if level < CURRENT_LEVEL or not self._logger.isEnabledFor(level):
            return
        fields.setdefault("logger", self.name)
        self._logger.log(level, format_event(lvl, **fields))

    def debug(self, **fields):
        self._log("debug", **fields)

    def info(self, **fields):
        self._log("info", **fields)

    def warn(self, **fields):
        self._log("warn", **fields)

    def error(self, **fields):
        self._log("error", **fields)


_LOGGER_CACHE: dict = {}


def get_logger(name: str) -> EventLogger:
    if name not in _LOGGER_CACHE:
        _LOGGER_CACHE[name] = EventLogger(name)
    return _LOGGER_CACHE[name]


log = get_logger("alley")
