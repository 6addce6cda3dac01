"""Gate evaluator.

Runs every check whose minimum phase is at or below the target phase, tier by
tier in registration order, then the cross-cutting checks, and derives a single
GateStatus from the failures. Checks never abort the evaluation: a failing or
crashing check is recorded and the next one runs.
"""

import dataclasses
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence, TextIO, Union

from ..errors import (
    INVALID_PHASE,
    REGISTRY_EMPTY,
    CheckFailure,
    ConfigurationError,
    ToolUnavailable,
)
from ..ui.format import (
    RULE,
    WARNING_ICON,
    ColorMode,
    colorize,
    format_check_line,
    format_count,
)
from ..status import write_status_file
from .registry import CheckDefinition, CheckRegistry
from .result import (
    CheckContext,
    CheckResult,
    EvaluationReport,
    GateStatus,
    Outcome,
    PhaseResult,
)

logger = logging.getLogger(__name__)


def validate_phase(target_phase: object) -> int:
    """Return the phase if it is a non-negative int.

    Raises:
        ConfigurationError: For negative or non-integer phases.
    """
    if isinstance(target_phase, bool) or not isinstance(target_phase, int):
        raise ConfigurationError(
            f"Phase must be an integer, got {target_phase!r}", code=INVALID_PHASE
        )
    if target_phase < 0:
        raise ConfigurationError(
            f"Phase must be >= 0, got {target_phase}",
            code=INVALID_PHASE,
            hints=["Use phase 0 for the foundation gates"],
        )
    return target_phase


class GateEvaluator:
    """Evaluates a check registry for a target phase and reports to a stream."""

    def __init__(
        self,
        registry: CheckRegistry,
        project_root: Union[str, Path] = ".",
        general_checks: Sequence[CheckDefinition] = (),
        out: Optional[TextIO] = None,
        color_mode: ColorMode = ColorMode.AUTO,
        quiet: bool = False,
    ):
        """Initialize the evaluator.

        Args:
            registry: Tiered checks.
            project_root: Directory checks resolve paths against.
            general_checks: Cross-cutting checks run once after all tiers.
            out: Stream for human-readable output (default: stdout).
            color_mode: Color output mode.
            quiet: Suppress human-readable output.
        """
        self.registry = registry
        self.project_root = Path(project_root)
        self.general_checks = list(general_checks)
        self.out = out
        self.color_mode = color_mode
        self.quiet = quiet

    def run(self, target_phase: int) -> EvaluationReport:
        """Run all checks for a phase.

        Raises:
            ConfigurationError: Before any check runs, for an invalid phase or
                an empty registry.
        """
        phase = validate_phase(target_phase)
        if len(self.registry) == 0:
            raise ConfigurationError(
                "No checks registered", code=REGISTRY_EMPTY,
                hints=["Add checks to quality-gates.yaml"],
            )

        ctx = CheckContext(project_root=self.project_root, phase=phase)
        logger.debug("Evaluating phase %d in %s", phase, self.project_root)

        self._emit(f"QUALITY GATES ENFORCEMENT - Phase {phase}")
        self._emit("=" * 43)

        # Local accumulator; the evaluator keeps no state between runs
        error_count = 0
        phase_results = []
        for tier in range(phase + 1):
            tier_result = PhaseResult(phase=tier)
            checks = self.registry.for_tier(tier)
            if checks:
                self._banner(f"PHASE {tier} Quality Gates")
            for check in checks:
                tier_result.results.append(self._run_check(check, ctx))
            error_count += tier_result.error_count
            phase_results.append(tier_result)

        general_results = []
        if self.general_checks:
            self._banner("General Quality Checks")
        for check in self.general_checks:
            result = self._run_check(check, ctx)
            if result.outcome == Outcome.FAIL:
                error_count += 1
            general_results.append(result)

        status = GateStatus.from_error_count(phase, error_count)
        report = EvaluationReport(
            status=status,
            phase_results=phase_results,
            general_results=general_results,
            project_root=self.project_root,
        )
        self._summary(report)
        logger.debug(
            "Phase %d finished: %s with %d errors",
            phase, status.status.value, error_count,
        )
        return report

    def _run_check(self, check: CheckDefinition, ctx: CheckContext) -> CheckResult:
        """Execute one check, converting every error into a recorded outcome."""
        logger.debug("Running check %s (tier %d)", check.check_id, check.min_phase)
        start = time.perf_counter()
        try:
            result = _coerce(check.check_id, check.entrypoint(ctx))
        except ToolUnavailable as e:
            result = CheckResult(
                check_id=check.check_id,
                outcome=Outcome.SKIP,
                message=str(e),
                details={"tool": e.tool},
            )
        except CheckFailure as e:
            result = CheckResult(
                check_id=check.check_id,
                outcome=Outcome.FAIL,
                message=str(e),
                details=dict(e.details),
            )
        except Exception as e:
            logger.debug("Check %s raised", check.check_id, exc_info=True)
            result = CheckResult.fail(check.check_id, f"Check execution error: {e}")
        end = time.perf_counter()

        # Checks may hand back shared instances; stamp a copy
        result = dataclasses.replace(
            result,
            check_id=check.check_id,
            title=check.title,
            phase=check.min_phase,
            duration_ms=int((end - start) * 1000),
            details=dict(result.details),
        )

        self._emit(format_check_line(result, self.color_mode, self._stream))
        if result.message and (
            result.outcome != Outcome.PASS or result.details.get("warning")
        ):
            self._emit(f"   {result.message}")
        return result

    @property
    def _stream(self) -> TextIO:
        return self.out if self.out is not None else sys.stdout

    def _emit(self, line: str = "") -> None:
        if not self.quiet:
            print(line, file=self._stream)

    def _banner(self, title: str) -> None:
        self._emit()
        self._emit(RULE)
        self._emit(title)
        self._emit(RULE)

    def _summary(self, report: EvaluationReport) -> None:
        status = report.status
        self._banner("QUALITY GATES SUMMARY")
        counts = [
            (len(report.results), "checks run"),
            (status.error_count, "failed"),
            (report.skipped_count, "skipped"),
        ]
        self._emit(", ".join(
            format_count(count, label, self.color_mode, self._stream)
            for count, label in counts
        ))
        if status.passed:
            self._emit(colorize(
                "ALL QUALITY GATES PASSED", "green", self.color_mode, self._stream
            ))
            self._emit(f"Task completion is allowed for Phase {status.phase}")
        else:
            self._emit(colorize(
                "QUALITY GATES FAILED", "red", self.color_mode, self._stream
            ))
            self._emit(
                f"{WARNING_ICON} Found {status.error_count} issues that must be "
                f"fixed before Phase {status.phase} is complete"
            )


def _coerce(check_id: str, value: object) -> CheckResult:
    """Accept plain boolean predicates as well as CheckResult."""
    if isinstance(value, CheckResult):
        return value
    if isinstance(value, bool):
        return CheckResult.ok(check_id) if value else CheckResult.fail(check_id, "")
    raise TypeError(f"check returned {type(value).__name__}, expected CheckResult or bool")


def evaluate(
    target_phase: int,
    registry: CheckRegistry,
    project_root: Union[str, Path] = ".",
    general_checks: Sequence[CheckDefinition] = (),
    status_path: Optional[Union[str, Path]] = None,
    out: Optional[TextIO] = None,
    color_mode: ColorMode = ColorMode.NEVER,
) -> GateStatus:
    """Evaluate a registry for a target phase.

    Args:
        target_phase: Phase to evaluate; every tier up to it runs.
        registry: Tiered checks.
        project_root: Directory checks resolve paths against.
        general_checks: Cross-cutting checks run once after all tiers.
        status_path: If given, the status file is written there as the last step.
            A failed write is logged; the status is still returned.
        out: Stream for human-readable output (default: stdout).
        color_mode: Color output mode.

    Returns:
        The final GateStatus.

    Raises:
        ConfigurationError: For an invalid phase or empty registry, before any
            check runs.
    """
    evaluator = GateEvaluator(
        registry,
        project_root=project_root,
        general_checks=general_checks,
        out=out,
        color_mode=color_mode,
    )
    status = evaluator.run(target_phase).status
    if status_path is not None:
        try:
            write_status_file(status, status_path)
        except OSError as e:
            logger.error("Could not write status file %s: %s", status_path, e)
    return status
