"""Built-in check kinds.

Each factory returns a check function suitable for CheckRegistry.register.
External collaborators (linters, test runners, project scripts) are wrapped
as command checks so that every check exposes the same run contract.
"""

import logging
import shlex
import shutil
import subprocess
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional, Sequence, Union

from ..errors import CheckFailure, ToolUnavailable
from .result import CheckContext, CheckResult

logger = logging.getLogger(__name__)

# Minimum line coverage per phase; phases above the table use DEFAULT_MIN_COVERAGE
COVERAGE_THRESHOLDS = {2: 70, 3: 75, 4: 80, 5: 85}
DEFAULT_MIN_COVERAGE = 90

# Keep failure messages readable when a tool dumps a lot of output
MAX_OUTPUT_CHARS = 10000


def files_exist(check_id: str, paths: Sequence[str]):
    """Check that every path is a regular file under the project root."""

    def run(ctx: CheckContext) -> CheckResult:
        missing = [p for p in paths if not ctx.path(p).is_file()]
        if missing:
            return CheckResult.fail(
                check_id, f"Missing files: {', '.join(missing)}", missing=missing
            )
        return CheckResult.ok(check_id, f"{len(paths)} files present")

    return run


def dirs_exist(check_id: str, paths: Sequence[str]):
    """Check that every path is a directory under the project root."""

    def run(ctx: CheckContext) -> CheckResult:
        missing = [p for p in paths if not ctx.path(p).is_dir()]
        if missing:
            return CheckResult.fail(
                check_id, f"Missing directories: {', '.join(missing)}", missing=missing
            )
        return CheckResult.ok(check_id, f"{len(paths)} directories present")

    return run


def tool_available(tool: str, root: Path) -> bool:
    """Whether a tool exists, as a project path or an executable on PATH."""
    if "/" in tool or "\\" in tool:
        return (root / tool).exists()
    return shutil.which(tool) is not None


def _last_line(text: str) -> str:
    lines = [line for line in (text or "").splitlines() if line.strip()]
    return lines[-1].strip() if lines else ""


def run_command(
    check_id: str,
    command: Union[str, Sequence[str]],
    requires: Optional[str] = None,
    timeout: Optional[float] = None,
):
    """Check that a command exits with status 0.

    Args:
        check_id: Check identifier used in results.
        command: Argument list, or a shell-style string split with shlex.
        requires: Optional tool that must exist for the check to apply.
            When absent the check is skipped rather than failed.
        timeout: Optional timeout in seconds. None waits indefinitely.
    """
    args = shlex.split(command) if isinstance(command, str) else list(command)
    if not args:
        raise ValueError(f"Empty command for check {check_id}")
    display = shlex.join(args)

    def run(ctx: CheckContext) -> CheckResult:
        if requires and not tool_available(requires, ctx.project_root):
            raise ToolUnavailable(requires)

        logger.debug("Running %s: %s (cwd=%s)", check_id, display, ctx.project_root)
        try:
            proc = subprocess.run(
                args,
                cwd=ctx.project_root,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except FileNotFoundError:
            return CheckResult.fail(
                check_id, f"Command not found: {args[0]}", command=display
            )
        except subprocess.TimeoutExpired:
            logger.error("Check %s timed out after %ss: %s", check_id, timeout, display)
            return CheckResult.fail(
                check_id,
                f"Command timed out after {timeout} seconds",
                command=display,
            )

        if proc.returncode != 0:
            stderr = (proc.stderr or "")[:MAX_OUTPUT_CHARS]
            stdout = (proc.stdout or "")[:MAX_OUTPUT_CHARS]
            message = f"{display} exited with status {proc.returncode}"
            last = _last_line(stderr) or _last_line(stdout)
            if last:
                message += f": {last}"
            return CheckResult.fail(
                check_id, message, command=display, exit_code=proc.returncode
            )

        return CheckResult.ok(check_id, command=display, exit_code=0)

    return run


def minimum_coverage(phase: int, thresholds: Optional[dict[int, int]] = None) -> int:
    """Minimum coverage percentage required at a phase.

    Custom thresholds override the default table per phase; phases they do
    not name keep their default minimum.
    """
    table = {**COVERAGE_THRESHOLDS, **(thresholds or {})}
    return table.get(phase, DEFAULT_MIN_COVERAGE)


def read_clover_coverage(report: Path) -> Optional[float]:
    """Read line coverage from a Clover XML report.

    Returns:
        Coverage percentage, or None if the report has no statements.

    Raises:
        CheckFailure: If the report cannot be parsed.
    """
    try:
        tree = ET.parse(report)
    except (ET.ParseError, OSError) as e:
        raise CheckFailure(f"Unreadable coverage report {report}: {e}")

    metrics = tree.getroot().find("./project/metrics")
    if metrics is None:
        raise CheckFailure(f"Coverage report has no project metrics: {report}")

    try:
        statements = int(metrics.get("statements", "0"))
        covered = int(metrics.get("coveredstatements", "0"))
    except ValueError as e:
        raise CheckFailure(f"Invalid metrics in coverage report {report}: {e}")

    if statements == 0:
        return None
    return covered * 100.0 / statements


def coverage(
    check_id: str,
    report: str,
    requires: Optional[str] = None,
    thresholds: Optional[dict[int, int]] = None,
):
    """Check that coverage meets the phase minimum.

    Skipped when the coverage tool or the report is not present.
    """

    def run(ctx: CheckContext) -> CheckResult:
        required = minimum_coverage(ctx.phase, thresholds)
        if requires and not tool_available(requires, ctx.project_root):
            raise ToolUnavailable(requires)

        report_path = ctx.path(report)
        if not report_path.is_file():
            return CheckResult.skip(
                check_id,
                f"Minimum required: {required}%; no coverage report at {report}",
                minimum=required,
            )

        percent = read_clover_coverage(report_path)
        if percent is None:
            return CheckResult.skip(
                check_id,
                f"Minimum required: {required}%; no code to measure yet",
                minimum=required,
            )

        message = f"{percent:.1f}% (minimum {required}%)"
        if percent < required:
            return CheckResult.fail(
                check_id, message, coverage=round(percent, 2), minimum=required
            )
        return CheckResult.ok(
            check_id, message, coverage=round(percent, 2), minimum=required
        )

    return run
