from __future__ import annotations

import json
import logging
import sys
from typing import Any, Dict, Iterable, Optional, TextIO

# Batch-run context copied from logger.info(..., extra={...}) into the payload.
EXTRA_FIELDS = (
    "event",
    "user_id",
    "item_id",
    "shape",
    "count",
    "skipped",
    "source",
    "path",
    "output_path",
    "exception_type",
)


class JsonFormatter(logging.Formatter):
    """
    Emits one JSON object per record for scoring and loading runs.

    Only the whitelisted ``extra`` fields are included, so a long batch run
    produces lines with a predictable shape (e.g. one ``recommend_user_success``
    per user with its ``count``). Values JSON cannot encode, such as paths, are
    written with ``str``.
    """

    def __init__(self, fields: Iterable[str] = EXTRA_FIELDS, timestamps: bool = True) -> None:
        super().__init__()
        self.fields = tuple(fields)
        self.timestamps = timestamps

    def format(self, record: logging.LogRecord) -> str:
        log_payload: Dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.timestamps:
            log_payload["time"] = self.formatTime(record, "%Y-%m-%dT%H:%M:%S")

        log_payload.update(
            {attr: getattr(record, attr) for attr in self.fields if hasattr(record, attr)}
        )

        if record.exc_info:
            log_payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_payload, ensure_ascii=False, default=str)


def configure_logger(
    name: str = "ubcf",
    level: int = logging.INFO,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Return the named ubcf logger with a single JSON handler attached.

    The handler writes to ``stream`` (stdout by default) and is only added
    once per logger name; later calls just update the level.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)

    logger.propagate = False
    return logger
