"""Structured JSON logging with redaction for mailaccess components.

What:
  Offer a tiny facade over Python streams so every mailaccess component can
  emit JSON log lines with consistent fields and automatic removal of
  credentials and message content.

Why:
  Session traces (connects, mailbox switches, search sizes) are the main
  debugging aid when a server misbehaves. A structured layout keeps them
  greppable, and redaction keeps passwords and subjects out of shared logs.

How:
  :class:`JsonLogger` stores a component label, a minimum severity and an
  optional target stream. ``extra`` keyword arguments are scrubbed by a
  recursive helper before being serialised with ``json.dumps``. When no stream
  is configured, ``sys.stderr`` is looked up at write time so redirected or
  captured streams are honoured and stdout stays free for command output.

Interfaces:
  :class:`JsonLogger`, :func:`get_logger`.

Invariants & Safety:
  - Every payload carries ``ts``, ``lvl``, ``msg`` and ``component``.
  - ``password``, ``subject`` and ``body`` values are replaced with
    ``[redacted]`` at any nesting depth.
  - Streams are flushed after every write.
"""
from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO


REDACTED = "[redacted]"
SENSITIVE_KEYS = frozenset({"password", "subject", "body"})
LEVELS = {"DEBUG": 10, "INFO": 20, "WARN": 30, "WARNING": 30, "ERROR": 40}


@dataclass
class JsonLogger:
    """Structured JSON logger with a severity threshold and redaction.

    Attributes:
      component: Label stored in every payload.
      level: Minimum severity name that is written.
      stream: Destination; ``None`` means ``sys.stderr`` at write time.
    """

    component: str = "mailaccess"
    level: str = "INFO"
    stream: Optional[TextIO] = None

    def enabled_for(self, level: str) -> bool:
        return LEVELS.get(level.upper(), 0) >= LEVELS.get(self.level.upper(), 20)

    def log(self, level: str, message: str, *, extra: Optional[Dict[str, Any]] = None) -> None:
        """Emit one JSON line if ``level`` passes the threshold.

        Args:
          level: Severity name (``debug``, ``info``, ``warn``, ``error``).
          message: Core log message.
          extra: Optional context, redacted recursively before writing.
        """

        if not self.enabled_for(level):
            return
        payload: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "lvl": level.upper(),
            "msg": message,
            "component": self.component,
        }
        if extra:
            payload.update(self._redact(extra))
        stream = self.stream if self.stream is not None else sys.stderr
        stream.write(json.dumps(payload, separators=(",", ":"), default=str))
        stream.write("\n")
        stream.flush()

    def debug(self, message: str, **kwargs: Any) -> None:
        self.log("DEBUG", message, extra=kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self.log("INFO", message, extra=kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.log("WARN", message, extra=kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.log("ERROR", message, extra=kwargs)

    @staticmethod
    def _redact(data: Dict[str, Any]) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for key, value in data.items():
            if key in SENSITIVE_KEYS:
                result[key] = REDACTED
            elif isinstance(value, dict):
                result[key] = JsonLogger._redact(value)
            else:
                result[key] = value
        return result


def get_logger(component: str, level: str = "INFO", stream: Optional[TextIO] = None) -> JsonLogger:
    """Construct a :class:`JsonLogger` bound to ``component``."""

    return JsonLogger(component=component, level=level, stream=stream)


__all__ = ["JsonLogger", "REDACTED", "get_logger"]
