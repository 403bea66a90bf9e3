# src/repofetch/util/log.py: Structured JSON logger.
# This module provides a centralized logging setup that outputs structured
# JSON logs. It uses contextvars to inject the name of the running operation
# (clone, extract, prune) into every record, so that log lines emitted from
# worker threads can still be attributed to the call that produced them.

import contextvars
import json
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

operation_context = contextvars.ContextVar('operation_context', default=None)

_PLAIN_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class JsonFormatter(logging.Formatter):
    def format(self, record):
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "operation": operation_context.get(),
        }
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record)


def get_logger(name):
    logger = logging.getLogger(name)
    if not logging.getLogger("repofetch").handlers:
        configure_logging()
    return logger


def configure_logging(level: str = "INFO", json_format: bool = True) -> None:
    """(Re)configure the package logger. Safe to call more than once."""
    root = logging.getLogger("repofetch")
    root.setLevel(level.upper())
    root.propagate = False
    for handler in list(root.handlers):
        root.removeHandler(handler)
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter() if json_format else logging.Formatter(_PLAIN_FORMAT))
    root.addHandler(handler)


@contextmanager
def operation(name: Optional[str]) -> Iterator[None]:
    """Tag log records emitted inside the block with an operation name."""
    token = operation_context.set(name)
    try:
        yield
    finally:
        operation_context.reset(token)
