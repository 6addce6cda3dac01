"""Gate system for phased quality enforcement.

Checks are registered against the minimum phase at which they apply; the
evaluator runs every tier up to the target phase and derives one gate status.
"""

from .result import (
    CheckContext,
    CheckResult,
    EvaluationReport,
    GateStatus,
    Outcome,
    PhaseResult,
    Status,
)
from .registry import CheckDefinition, CheckRegistry

__all__ = [
    "CheckContext",
    "CheckResult",
    "EvaluationReport",
    "GateStatus",
    "Outcome",
    "PhaseResult",
    "Status",
    "CheckDefinition",
    "CheckRegistry",
]
