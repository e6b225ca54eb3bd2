# core/logging.py
# -*- coding: utf-8 -*-

import sys
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from .config import LOG_DIR

# ------------------------------------------------
# terminal logger
# ------------------------------------------------
logger = logging.getLogger("campus_portal")
logger.setLevel(logging.DEBUG)

if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        "[%(asctime)s] [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_event(kind: str, payload: Dict[str, Any]) -> None:
    """
    Append one JSONL audit record (submit, status change, delete,
    vocabulary edits) for later review.
    """
    ts = datetime.now(timezone.utc).isoformat()
    log_path = LOG_DIR / "audit.jsonl"

    record = {
        "timestamp": ts,
        "kind": kind,
        **payload,
    }

    with log_path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")
