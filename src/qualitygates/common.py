"""Common utilities and constants for quality-gates.

This module defines contract-level constants and helpers used across all components.
"""

from datetime import datetime

# Schema version as integer per contract
SCHEMA_VERSION = 1

# Producer info - identifies the implementation that created records
PRODUCER = {
    "name": "quality-gates",
    "version": "0.1.0",
}

# Status file written after every run, relative to the project root
STATUS_FILE = ".quality-gates-status"

# Project config file, relative to the project root
CONFIG_FILE = "quality-gates.yaml"

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def local_now() -> str:
    """Return current local wall-clock time for status records.

    Returns:
        Timestamp in "YYYY-MM-DD HH:MM:SS" format (e.g., "2025-02-02 12:00:00").
    """
    return datetime.now().strftime(TIMESTAMP_FORMAT)
