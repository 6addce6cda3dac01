"""quality-gates - phased quality gate enforcement.

Runs cumulative, phase-tiered checks against a project and records a single
PASSED/FAILED status.
"""

from .errors import CheckFailure, ConfigurationError, ToolUnavailable
from .gates import (
    CheckContext,
    CheckDefinition,
    CheckRegistry,
    CheckResult,
    GateStatus,
    Outcome,
    Status,
)
from .gates.evaluator import GateEvaluator, evaluate

__version__ = "0.1.0"

__all__ = [
    "CheckContext",
    "CheckDefinition",
    "CheckFailure",
    "CheckRegistry",
    "CheckResult",
    "ConfigurationError",
    "GateEvaluator",
    "GateStatus",
    "Outcome",
    "Status",
    "ToolUnavailable",
    "evaluate",
]
