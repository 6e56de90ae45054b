"""Logging utilities for gl-batch."""

from __future__ import annotations

import json
import logging
import sys

from gl_batch.models import LOGGER_NAME


class StructuredFormatter(logging.Formatter):
    """Formatter that can emit JSON lines when configured."""

    def __init__(self, json_mode: bool = False):
        super().__init__()
        self.json_mode = json_mode

    def format(self, record: logging.LogRecord) -> str:
        if self.json_mode and hasattr(record, "repo_result"):
            return json.dumps(record.repo_result.to_dict())
        if self.json_mode:
            return json.dumps({"level": record.levelname, "message": record.getMessage()})
        return f"[{record.levelname:<7}] {record.getMessage()}"


def setup_logging(json_mode: bool = False, verbose: bool = False) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter(json_mode=json_mode))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def is_json_mode(logger: logging.Logger) -> bool:
    handler = logger.handlers[0] if logger.handlers else None
    return bool(handler and getattr(handler.formatter, "json_mode", False))
