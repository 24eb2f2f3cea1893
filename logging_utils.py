# logging_utils.py
"""
Logging for the calculator service.

- configure_logging: console logging for the server / CLI.
- log_calculation: one JSONL record per calculation in <log_dir>/calculator.log.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from config import config


LOG_FILENAME = "calculator.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or config.logging.level).upper(),
        format=LOG_FORMAT,
    )


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _log_path() -> str:
    return os.path.join(config.logging.log_dir, LOG_FILENAME)


def log_calculation(
    expression: Any,
    result: Optional[float] = None,
    error: Optional[str] = None,
    code: Optional[str] = None,
    source: str = "api",
) -> None:
    """
    Append one calculation to the JSONL log.

    Write failures are reported through the module logger; they never reach
    the caller.
    """
    if not config.logging.jsonl_enabled:
        return

    record: Dict[str, Any] = {
        "timestamp": utc_timestamp(),
        "source": source,
        "expression": expression,
        "success": error is None,
    }
    if error is None:
        record["result"] = result
    else:
        record["error"] = error
        record["code"] = code

    try:
        os.makedirs(config.logging.log_dir, exist_ok=True)
        with open(_log_path(), "a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")
    except OSError as e:
        logger.warning("Could not write calculation log: %s", e)
