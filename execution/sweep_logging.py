"""
Liquidator sweep logging helpers.

Emits one structured JSON log line per sweep event with standard metadata.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


def log_sweep_event(event: str, run_id: str, level: int = logging.INFO, **fields) -> None:
    """
    Emit a structured sweep log line.
    """
    payload = {
        "event": event,
        "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        "run_id": run_id,
    }
    payload.update(fields)

    logger.log(level, "LIQUIDATOR_SWEEP %s", json.dumps(payload, sort_keys=True, default=str))
