"""
Logging setup and the one-line JSON format used for request logs.
"""
import json
import logging
from typing import Any, Dict

from config import LOG_LEVEL

LOGGER_NAME = "concept_atlas"


def configure_logging(level: str = LOG_LEVEL) -> logging.Logger:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format="%(message)s")
    return logging.getLogger(LOGGER_NAME)


def structured_log_line(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)
