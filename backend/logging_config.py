import json
import logging
import os
import socket
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
SERVICE_NAME = os.getenv("SERVICE_NAME", "mail-dispatch")

_RESERVED = {
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename", "module",
    "exc_info", "exc_text", "stack_info", "lineno", "funcName", "created", "msecs",
    "relativeCreated", "thread", "threadName", "processName", "process", "message",
    "asctime", "taskName",
}

# Top-level keys lifted out of "props"
_PROMOTED = ("component", "recipient", "file_id")


def _utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _jsonable(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return repr(value)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base: Dict[str, Any] = {
            "ts": _utc_iso(),
            "level": record.levelname,
            "logger": record.name,
            "service": SERVICE_NAME,
            "host": socket.gethostname(),
            "msg": record.getMessage(),
        }

        for key in _PROMOTED:
            value = getattr(record, key, None)
            if value:
                base[key] = value

        # Put all custom extras under "props" to avoid collisions
        props: Dict[str, Any] = {}
        for k, v in record.__dict__.items():
            if k in _RESERVED or k.startswith("_") or k in _PROMOTED:
                continue
            props[k] = _jsonable(v)

        if props:
            base["props"] = props

        if record.exc_info:
            base["exc"] = self.formatException(record.exc_info)

        return json.dumps(base, ensure_ascii=False)


class ComponentLogger(logging.LoggerAdapter):
    """Adapter that keeps call-site extras alongside the bound component."""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def get_logger(name: str, component: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(name)

    if not logger.handlers:
        logger.setLevel(LOG_LEVEL)

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())

        logger.addHandler(handler)
        logger.propagate = False

    if component:
        return ComponentLogger(logger, {"component": component})  # type: ignore
    return logger
