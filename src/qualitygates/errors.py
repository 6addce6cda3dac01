"""Centralized error handling for quality-gates.

This module provides:
- Exception types raised by the evaluator and by checks
- Standard error codes
- Error envelope format for --json output
- Helper functions for consistent error reporting
"""

import json
import sys
from dataclasses import dataclass, field
from typing import Optional


# =============================================================================
# Exceptions
# =============================================================================


class QualityGatesError(Exception):
    """Base class for quality-gates errors."""


class ConfigurationError(QualityGatesError):
    """Raised for invalid phases, registries or config files.

    Always raised before any check has executed.
    """

    def __init__(self, message: str, code: str = "CONFIG_INVALID", hints=None):
        self.code = code
        self.hints = list(hints or [])
        super().__init__(message)


class CheckFailure(QualityGatesError):
    """Raised by a check to fail with a message."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.details = details or {}
        super().__init__(message)


class ToolUnavailable(QualityGatesError):
    """Raised by a check when an optional external tool is absent."""

    def __init__(self, tool: str, message: Optional[str] = None):
        self.tool = tool
        super().__init__(message or f"Tool not available: {tool}")


# =============================================================================
# Error Codes
# =============================================================================

# Configuration errors
INVALID_PHASE = "INVALID_PHASE"
CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
CONFIG_INVALID = "CONFIG_INVALID"
REGISTRY_EMPTY = "REGISTRY_EMPTY"

# Lookup errors
CHECK_NOT_FOUND = "CHECK_NOT_FOUND"
STATUS_NOT_FOUND = "STATUS_NOT_FOUND"

# Generic errors
INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Error Envelope
# =============================================================================


@dataclass
class GateError:
    """Structured error for JSON output.

    Attributes:
        code: Machine-readable error code.
        message: Human-readable error message.
        hints: Actionable suggestions for resolving the error.
        details: Context-specific error details.
    """

    code: str
    message: str
    hints: list[str] = field(default_factory=list)
    details: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to error envelope dict."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "hints": self.hints,
                "details": self.details,
            }
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    def print_json(self, file=None) -> None:
        """Print error as JSON to file (default: stderr)."""
        if file is None:
            file = sys.stderr
        print(self.to_json(), file=file)

    def print_text(self, file=None) -> None:
        """Print error as human-readable text to file (default: stderr)."""
        if file is None:
            file = sys.stderr
        print(f"Error: {self.message}", file=file)
        if self.hints:
            for hint in self.hints:
                print(f"  Hint: {hint}", file=file)


# =============================================================================
# Factory Functions
# =============================================================================


def invalid_phase(value: str) -> GateError:
    """Create error for an invalid target phase."""
    return GateError(
        code=INVALID_PHASE,
        message=f"Invalid phase: {value}",
        hints=["Phase must be a non-negative integer (e.g., 0, 1, 2)"],
        details={"phase": value},
    )


def config_not_found(path: str) -> GateError:
    """Create error for a missing config file."""
    return GateError(
        code=CONFIG_NOT_FOUND,
        message=f"Config file not found: {path}",
        hints=[
            "Check that the --config path is correct",
            "Omit --config to use quality-gates.yaml or the built-in defaults",
        ],
        details={"path": path},
    )


def check_not_found(check_id: str, suggestions: Optional[list[str]] = None) -> GateError:
    """Create error for an unknown check."""
    hints = ["Run: gate-evaluator --list"]
    if suggestions:
        hints.insert(0, f"Did you mean: {', '.join(suggestions)}?")
    return GateError(
        code=CHECK_NOT_FOUND,
        message=f"Check not found: {check_id}",
        hints=hints,
        details={"check_id": check_id},
    )


def status_not_found(path: str) -> GateError:
    """Create error for a missing status file."""
    return GateError(
        code=STATUS_NOT_FOUND,
        message=f"Status file not found: {path}",
        hints=["Run: gate-evaluator <phase>"],
        details={"path": path},
    )


def from_configuration_error(exc: ConfigurationError) -> GateError:
    """Create an envelope from a ConfigurationError."""
    return GateError(code=exc.code, message=str(exc), hints=list(exc.hints))


def internal_error(message: str, details: Optional[dict] = None) -> GateError:
    """Create internal error."""
    return GateError(
        code=INTERNAL_ERROR,
        message=f"Internal error: {message}",
        hints=["Please report this issue"],
        details=details or {},
    )


# =============================================================================
# Output Helper
# =============================================================================


def print_error(
    error: GateError,
    json_mode: bool = False,
    file=None,
) -> None:
    """Print error in appropriate format.

    Args:
        error: The error to print.
        json_mode: If True, print as JSON envelope. If False, print as text.
        file: Output file (default: stderr).
    """
    if json_mode:
        error.print_json(file)
    else:
        error.print_text(file)
