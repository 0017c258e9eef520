"""Configuration constants and environment lookups."""

import os
from pathlib import Path
from typing import Optional

# Upload limits for CSV files
MAX_CSV_BYTES = 5 * 1024 * 1024
MAX_REPORTED_ERRORS = 10

# Window scanned by recurring detection
RECURRING_LOOKBACK_MONTHS = 12

# Plaid error code returned for items linked without the needed product consent
ADDITIONAL_CONSENT_REQUIRED = "ADDITIONAL_CONSENT_REQUIRED"

DB_PATH_ENV = "BUDGETFLOW_DB_PATH"
LOG_LEVEL_ENV = "BUDGETFLOW_LOG_LEVEL"


def default_database_path() -> str:
    """Return the database path from the environment or ~/.budgetflow/budgetflow.db."""
    database_path = os.environ.get(DB_PATH_ENV)
    if database_path is None:
        db_dir = Path.home() / ".budgetflow"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "budgetflow.db")
    return database_path


def log_level(verbose: bool = False) -> str:
    """Resolve the logging level name."""
    if verbose:
        return "DEBUG"
    return os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()


def plaid_settings() -> dict[str, Optional[str]]:
    """Read Plaid credentials from the environment."""
    return {
        "client_id": os.environ.get("PLAID_CLIENT_ID"),
        "secret": os.environ.get("PLAID_SECRET"),
        "environment": os.environ.get("PLAID_ENV", "sandbox"),
    }
