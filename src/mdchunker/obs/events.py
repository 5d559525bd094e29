"""Structured event emission on top of structlog."""

from enum import Enum
from typing import Any

from ..core.logging import log


class EventLevel(str, Enum):
    """Event levels for structured logging."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    DEBUG = "debug"


def _infer_level(op: str) -> EventLevel:
    if any(k in op for k in ["error", "fail"]):
        return EventLevel.ERROR
    if any(k in op for k in ["warning", "warn"]):
        return EventLevel.WARNING
    return EventLevel.INFO


def emit_event(event_type: str, **kwargs: Any) -> None:
    """Emit one standardized event.

    ``event_type`` is dotted: ``"chunk.emit"`` becomes stage ``chunk`` and
    op ``emit``. The level is inferred from the op unless ``level=`` is given.
    """
    stage, _, op = event_type.partition(".")
    if not op:
        stage, op = "core", event_type

    level = EventLevel(kwargs.pop("level", _infer_level(op)))
    fields = {k: v for k, v in kwargs.items() if v is not None}

    if level is EventLevel.ERROR:
        log.error(event_type, stage=stage, op=op, **fields)
    elif level is EventLevel.WARNING:
        log.warning(event_type, stage=stage, op=op, **fields)
    elif level is EventLevel.DEBUG:
        log.debug(event_type, stage=stage, op=op, **fields)
    else:
        log.info(event_type, stage=stage, op=op, **fields)
