"""
Process-level settings for the liquidator daemon.

Environment-driven so containers can tune logging and ledger access without
code edits. Everything a stage needs at sweep time lives in the hot-reloaded
TOML document instead (see config/loader.py).
"""

import os

# ============================================================================
# LOGGING
# ============================================================================
# Used until the config file's [log] table is read, and as its fallback
LOG_LEVEL = os.getenv("LIQUIDATOR_LOG_LEVEL", "info")
LOG_OUTPUT_FORMAT = os.getenv("LIQUIDATOR_LOG_FORMAT", "text")   # "text" or "json"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# ============================================================================
# LEDGER QUERY CLIENT
# ============================================================================
LEDGER_TIMEOUT_SEC = float(os.getenv("LIQUIDATOR_LEDGER_TIMEOUT_SEC", "10"))
LEDGER_MAX_RETRIES = int(os.getenv("LIQUIDATOR_LEDGER_MAX_RETRIES", "3"))
LEDGER_BACKOFF_FACTOR = float(os.getenv("LIQUIDATOR_LEDGER_BACKOFF_FACTOR", "0.5"))

# ============================================================================
# CONFIG FILE WATCHER
# ============================================================================
CONFIG_WATCH_JOIN_TIMEOUT_SEC = float(os.getenv("LIQUIDATOR_CONFIG_WATCH_JOIN_TIMEOUT_SEC", "5"))
