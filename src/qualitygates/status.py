"""Persisted gate status file.

The status file is the only artifact of a run besides console output. It is a
flat KEY=VALUE text file, rewritten in full after every evaluation:

    QUALITY_GATES_STATUS=PASSED
    PHASE=1
    TIMESTAMP=2025-02-02 12:00:00
    ERRORS=0
"""

import os
from pathlib import Path
from typing import Union

from .gates.result import GateStatus, Status

STATUS_KEYS = ("QUALITY_GATES_STATUS", "PHASE", "TIMESTAMP", "ERRORS")


def format_status(status: GateStatus) -> str:
    """Render a status record as KEY=VALUE lines."""
    values = {
        "QUALITY_GATES_STATUS": status.status.value,
        "PHASE": str(status.phase),
        "TIMESTAMP": status.timestamp,
        "ERRORS": str(status.error_count),
    }
    return "".join(f"{key}={values[key]}\n" for key in STATUS_KEYS)


def write_status_file(status: GateStatus, path: Union[str, Path]) -> Path:
    """Write the status file atomically, replacing any previous one."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    # Atomic write via temp file with PID for race safety
    temp_path = path.with_name(f"{path.name}.tmp.{os.getpid()}")
    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            f.write(format_status(status))
        temp_path.replace(path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise
    return path


def parse_status(text: str) -> GateStatus:
    """Parse KEY=VALUE status text.

    Raises:
        ValueError: If a key is missing or a value is malformed.
    """
    values = {}
    for line in text.splitlines():
        if not line.strip() or "=" not in line:
            continue
        key, _, value = line.partition("=")
        values[key.strip()] = value.strip()

    missing = [k for k in STATUS_KEYS if k not in values]
    if missing:
        raise ValueError(f"Status file missing keys: {', '.join(missing)}")

    try:
        return GateStatus(
            status=Status(values["QUALITY_GATES_STATUS"]),
            phase=int(values["PHASE"]),
            error_count=int(values["ERRORS"]),
            timestamp=values["TIMESTAMP"],
        )
    except ValueError as e:
        raise ValueError(f"Invalid status file: {e}")


def read_status_file(path: Union[str, Path]) -> GateStatus:
    """Read a status file written by write_status_file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the contents are malformed.
    """
    with open(path, "r", encoding="utf-8") as f:
        return parse_status(f.read())
