"""Gate result types and dataclasses.

Defines the structured output format for check and gate runs.
"""

import json
import platform
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from ..common import PRODUCER, SCHEMA_VERSION, local_now


class Outcome(Enum):
    """Outcome of a single check."""

    PASS = "PASS"
    FAIL = "FAIL"
    SKIP = "SKIP"  # Optional tool absent or check not applicable

    @property
    def label(self) -> str:
        """Console label for the outcome."""
        return {
            Outcome.PASS: "PASSED",
            Outcome.FAIL: "FAILED",
            Outcome.SKIP: "SKIPPED",
        }[self]


class Status(Enum):
    """Aggregate gate status."""

    PASSED = "PASSED"
    FAILED = "FAILED"


@dataclass
class CheckContext:
    """Context provided to check execution."""

    project_root: Path
    phase: int = 0

    def path(self, relative: str) -> Path:
        """Resolve a project-relative path."""
        return self.project_root / relative


@dataclass
class CheckResult:
    """Result of a check run.

    This is the primary output of executing a check.
    """

    check_id: str
    outcome: Outcome
    message: str = ""
    title: str = ""
    phase: int = 0
    duration_ms: int = 0
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        """Skipped checks do not count as failures."""
        return self.outcome != Outcome.FAIL

    @classmethod
    def ok(cls, check_id: str, message: str = "", **details: Any) -> "CheckResult":
        return cls(check_id=check_id, outcome=Outcome.PASS, message=message, details=details)

    @classmethod
    def fail(cls, check_id: str, message: str, **details: Any) -> "CheckResult":
        return cls(check_id=check_id, outcome=Outcome.FAIL, message=message, details=details)

    @classmethod
    def skip(cls, check_id: str, message: str, **details: Any) -> "CheckResult":
        return cls(check_id=check_id, outcome=Outcome.SKIP, message=message, details=details)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "check_id": self.check_id,
            "title": self.title or self.check_id,
            "phase": self.phase,
            "outcome": self.outcome.value,
            "message": self.message,
            "duration_ms": self.duration_ms,
            "details": self.details,
        }


@dataclass
class PhaseResult:
    """Checks actually run for one phase tier, in execution order."""

    phase: int
    results: list[CheckResult] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(1 for r in self.results if r.outcome == Outcome.FAIL)

    def to_dict(self) -> dict:
        return {
            "phase": self.phase,
            "error_count": self.error_count,
            "results": [r.to_dict() for r in self.results],
        }


@dataclass(frozen=True)
class GateStatus:
    """Terminal record of one gate evaluation.

    Created once per invocation and never mutated.
    """

    status: Status
    phase: int
    error_count: int
    timestamp: str = field(default_factory=local_now)

    def __post_init__(self):
        if (self.error_count == 0) != (self.status == Status.PASSED):
            raise ValueError(
                f"Inconsistent gate status: {self.status.value} with "
                f"{self.error_count} errors"
            )

    @classmethod
    def from_error_count(cls, phase: int, error_count: int) -> "GateStatus":
        status = Status.PASSED if error_count == 0 else Status.FAILED
        return cls(status=status, phase=phase, error_count=error_count)

    @property
    def passed(self) -> bool:
        return self.status == Status.PASSED

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "status": self.status.value,
            "phase": self.phase,
            "timestamp": self.timestamp,
            "error_count": self.error_count,
        }


@dataclass
class GateEnvironment:
    """Runtime environment information."""

    os: str = field(default_factory=lambda: sys.platform)
    python: str = field(default_factory=lambda: platform.python_version())
    version: str = PRODUCER["version"]

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "os": self.os,
            "python": self.python,
            "version": self.version,
        }


@dataclass
class EvaluationReport:
    """Full result of an evaluation: every check run plus the final status."""

    status: GateStatus
    phase_results: list[PhaseResult] = field(default_factory=list)
    general_results: list[CheckResult] = field(default_factory=list)
    environment: GateEnvironment = field(default_factory=GateEnvironment)
    project_root: Optional[Path] = None

    @property
    def results(self) -> list[CheckResult]:
        """All results in execution order."""
        ordered = [r for p in self.phase_results for r in p.results]
        return ordered + list(self.general_results)

    @property
    def executed_ids(self) -> list[str]:
        return [r.check_id for r in self.results]

    @property
    def error_count(self) -> int:
        return self.status.error_count

    @property
    def skipped_count(self) -> int:
        return sum(1 for r in self.results if r.outcome == Outcome.SKIP)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "schema_name": "qualitygates.report",
            "schema_version": SCHEMA_VERSION,
            "gate": self.status.to_dict(),
            "phases": [p.to_dict() for p in self.phase_results],
            "general": [r.to_dict() for r in self.general_results],
            "environment": self.environment.to_dict(),
        }
        if self.project_root is not None:
            result["project_root"] = str(self.project_root)
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)
