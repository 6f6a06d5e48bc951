"""
Structured logging for form_conditions.

JSON lines when LOG_FORMAT=json, readable output otherwise.

Usage:
    from form_conditions.logger import logger

    logger.set_context(form_id="user_register")
    logger.debug("Rule evaluated", target="email", result=True)
    logger.event("rule_loaded", target="email", source="newsletter")
"""

import logging
import json
import os
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from form_conditions.settings import settings


# Context-local extra fields, isolated between threads and tasks
_extra_context_var: ContextVar[Optional[Dict[str, Any]]] = ContextVar('extra_context', default=None)


class StructuredLogger:
    """
    Structured logger on top of the stdlib logging module.

    - JSON format (LOG_FORMAT=json)
    - Readable format (default)
    - Keyword extras on every call
    - event() for business events
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(name)

        if not self.logger.handlers:
            self._setup_logger()

    def _setup_logger(self) -> None:
        """Configure level, handler and format from settings and environment"""
        level_name = settings.get_nested("logging.level", "INFO")
        level = getattr(logging, level_name.upper(), logging.INFO)
        self.logger.setLevel(level)

        handler = logging.StreamHandler()
        handler.setLevel(level)

        log_format = os.environ.get("LOG_FORMAT", "readable")

        if log_format == "json":
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
    def _extra_context(self) -> Dict[str, Any]:
        ctx = _extra_context_var.get()
        if ctx is None:
            ctx = {}
            _extra_context_var.set(ctx)
        return ctx

    def set_context(self, **kwargs: Any) -> None:
        """Set extra fields added to every record (context-local)"""
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

        if self._extra_context:
            log_entry.update(self._extra_context)

        if kwargs:
            log_entry.update(kwargs)

        return log_entry

    def _should_use_json(self) -> bool:
        return os.environ.get("LOG_FORMAT", "readable") == "json"

    def _format_readable(self, message: str, **kwargs: Any) -> str:
        extras = {**self._extra_context, **kwargs}
        if not extras:
            return message
        return f"{message} [{', '.join(f'{k}={v}' for k, v in extras.items())}]"

    def _log(self, level: str, message: str, log_method, **kwargs: Any) -> None:
        if self._should_use_json():
            structured = self._format_structured(level, message, **kwargs)
            log_method(json.dumps(structured, ensure_ascii=False, default=str))
        else:
            log_method(self._format_readable(message, **kwargs))

    def is_enabled_for(self, level: int) -> bool:
        return self.logger.isEnabledFor(level)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message"""
        self._log("DEBUG", message, self.logger.debug, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message"""
        self._log("INFO", message, self.logger.info, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message"""
        self._log("WARNING", message, self.logger.warning, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message"""
        self._log("ERROR", message, self.logger.error, **kwargs)

    def event(self, event_type: str, **kwargs: Any) -> None:
        """
        Log a rule lifecycle event.

        Example:
            logger.event("rules_loaded", source="rules.yaml", count=3)
        """
        self._log("EVENT", event_type, self.logger.info, **kwargs)


logger = StructuredLogger("form_conditions")
