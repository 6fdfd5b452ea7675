"""
Structured logging for implicate.

JSON logs for production, readable output for development.
Every line carries the id of the resolution it was emitted from.

Usage:
    from implicate.logger import logger

    logger.info("Registry created", store="MemoryStore")
    logger.event("registry.get.returned", type="FileExt", id="test")
"""

import json
import logging
import os
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from implicate.settings import get_settings


# Context-local resolution tracking; isolated between asyncio tasks
_resolution_id_var: ContextVar[Optional[str]] = ContextVar('resolution_id', default=None)
_extra_context_var: ContextVar[Optional[Dict[str, Any]]] = ContextVar('extra_context', default=None)


class StructuredLogger:
    """
    Structured logger with JSON support and resolution tracing.

    - JSON output when LOG_FORMAT=json (or logging.format: json)
    - Readable output otherwise
    - resolution_id attached to each line while a resolution is active
    - event() helper for trace events
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(name)

        if not self.logger.handlers:
            self._setup_logger()

    def _setup_logger(self) -> None:
        level_name = get_settings().get_nested("logging.level", "INFO")
        level = getattr(logging, str(level_name).upper(), logging.INFO)
        self.logger.setLevel(level)

        handler = logging.StreamHandler()
        handler.setLevel(level)

        if self._should_use_json():
            formatter = logging.Formatter("%(message)s")
        else:
            formatter = logging.Formatter(
                "[%(asctime)s] %(levelname)s - %(message)s",
                datefmt="%H:%M:%S"
            )

        handler.setFormatter(formatter)
        self.logger.addHandler(handler)
        self.logger.propagate = False

    @property
    def resolution_id(self) -> Optional[str]:
        """Context-local id of the resolution in progress"""
        return _resolution_id_var.get()

    def set_resolution(self, resolution_id: Optional[str]) -> Token:
        """Set the resolution id; returns a token for reset_resolution()"""
        return _resolution_id_var.set(resolution_id)

    def reset_resolution(self, token: Token) -> None:
        """Restore the resolution id that was active before set_resolution()"""
        _resolution_id_var.reset(token)

    @property
    def _extra_context(self) -> Dict[str, Any]:
        ctx = _extra_context_var.get()
        if ctx is None:
            ctx = {}
            _extra_context_var.set(ctx)
        return ctx

    def set_context(self, **kwargs: Any) -> None:
        """Set extra context (context-local)"""
        ctx = dict(self._extra_context)
        ctx.update(kwargs)
        _extra_context_var.set(ctx)

    def clear_context(self) -> None:
        _extra_context_var.set({})

    def _format_structured(self, level: str, message: str, **kwargs: Any) -> Dict[str, Any]:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": level,
            "logger": self.name,
            "message": message,
        }

        if self.resolution_id:
            log_entry["resolution_id"] = self.resolution_id

        if self._extra_context:
            log_entry.update(self._extra_context)

        if kwargs:
            log_entry.update(kwargs)

        return log_entry

    def _should_use_json(self) -> bool:
        log_format = os.environ.get("LOG_FORMAT") or get_settings().get_nested("logging.format", "readable")
        return log_format == "json"

    def _log(self, level: str, message: str, log_method, **kwargs: Any) -> None:
        if self._should_use_json():
            structured = self._format_structured(level, message, **kwargs)
            log_method(json.dumps(structured, ensure_ascii=False, default=repr))
        else:
            if kwargs:
                extras = ", ".join(f"{k}={v}" for k, v in kwargs.items())
                full_message = f"{message} [{extras}]"
            else:
                full_message = message

            if self.resolution_id:
                full_message = f"[{self.resolution_id}] {full_message}"

            log_method(full_message)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log("DEBUG", message, self.logger.debug, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log("INFO", message, self.logger.info, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log("WARNING", message, self.logger.warning, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log("ERROR", message, self.logger.error, **kwargs)

    def event(self, event_type: str, level: int = logging.INFO, **kwargs: Any) -> None:
        """
        Log a trace event.

        Args:
            event_type: Event name (e.g. "registry.get.returned")
            level: Logging level for the line
            **kwargs: Event attributes

        Example:
            logger.event("implicator.put", type="FileExt", value="json5")
        """
        if not self.logger.isEnabledFor(level):
            return
        self._log("EVENT", event_type, lambda msg: self.logger.log(level, msg), **kwargs)


# Singleton logger
logger = StructuredLogger("implicate")


def create_test_logger(name: str = "test") -> StructuredLogger:
    """Create an isolated logger for tests"""
    return StructuredLogger(f"implicate.{name}")
