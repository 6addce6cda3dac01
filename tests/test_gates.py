"""Tests for gate result types and the check registry.

Tests cover:
- CheckResult / PhaseResult / GateStatus dataclasses
- Registry operations (registration, tiers, lookup, aliases)
"""

import json
import pytest
from pathlib import Path

from qualitygates.gates.result import (
    CheckContext,
    CheckResult,
    EvaluationReport,
    GateStatus,
    Outcome,
    PhaseResult,
    Status,
)
from qualitygates.gates.registry import CheckDefinition, CheckRegistry


def _passing(ctx):
    return True


class TestCheckResult:
    """Tests for CheckResult dataclass."""

    def test_ok_result(self):
        """Should create a passing result."""
        result = CheckResult.ok("config-files", "3 files present")
        assert result.outcome == Outcome.PASS
        assert result.passed is True
        assert result.message == "3 files present"

    def test_fail_result_with_details(self):
        """Should create a failing result carrying details."""
        result = CheckResult.fail("config-files", "Missing files", missing=["a"])
        assert result.outcome == Outcome.FAIL
        assert result.passed is False
        assert result.details == {"missing": ["a"]}

    def test_skip_is_not_a_failure(self):
        """Skipped checks count as passed."""
        result = CheckResult.skip("phpunit", "Tool not available")
        assert result.outcome == Outcome.SKIP
        assert result.passed is True

    def test_outcome_labels(self):
        assert Outcome.PASS.label == "PASSED"
        assert Outcome.FAIL.label == "FAILED"
        assert Outcome.SKIP.label == "SKIPPED"

    def test_to_dict(self):
        """Should convert to dictionary."""
        result = CheckResult(
            check_id="php-standards",
            outcome=Outcome.FAIL,
            message="exit 1",
            title="PHP Standards",
            phase=1,
            duration_ms=12,
        )
        d = result.to_dict()

        assert d["check_id"] == "php-standards"
        assert d["title"] == "PHP Standards"
        assert d["outcome"] == "FAIL"
        assert d["phase"] == 1
        assert d["duration_ms"] == 12

    def test_title_defaults_to_id(self):
        d = CheckResult.ok("x").to_dict()
        assert d["title"] == "x"


class TestPhaseResult:
    """Tests for PhaseResult."""

    def test_error_count_counts_failures_only(self):
        phase = PhaseResult(
            phase=1,
            results=[
                CheckResult.ok("a"),
                CheckResult.fail("b", "boom"),
                CheckResult.skip("c", "no tool"),
                CheckResult.fail("d", "boom"),
            ],
        )
        assert phase.error_count == 2

    def test_empty_phase(self):
        assert PhaseResult(phase=3).error_count == 0


class TestGateStatus:
    """Tests for GateStatus."""

    def test_passed_from_zero_errors(self):
        status = GateStatus.from_error_count(phase=0, error_count=0)
        assert status.status == Status.PASSED
        assert status.passed is True
        assert status.exit_code == 0

    def test_failed_from_errors(self):
        status = GateStatus.from_error_count(phase=2, error_count=3)
        assert status.status == Status.FAILED
        assert status.exit_code == 1
        assert status.error_count == 3
        assert status.phase == 2

    def test_inconsistent_status_rejected(self):
        """error_count == 0 must match PASSED."""
        with pytest.raises(ValueError):
            GateStatus(status=Status.PASSED, phase=0, error_count=1)
        with pytest.raises(ValueError):
            GateStatus(status=Status.FAILED, phase=0, error_count=0)

    def test_is_immutable(self):
        status = GateStatus.from_error_count(phase=0, error_count=0)
        with pytest.raises(Exception):
            status.error_count = 5

    def test_timestamp_format(self):
        status = GateStatus.from_error_count(phase=0, error_count=0)
        # YYYY-MM-DD HH:MM:SS
        assert len(status.timestamp) == 19
        assert status.timestamp[4] == "-" and status.timestamp[10] == " "

    def test_to_dict(self):
        status = GateStatus(
            status=Status.FAILED, phase=1, error_count=2, timestamp="2025-02-02 12:00:00"
        )
        assert status.to_dict() == {
            "status": "FAILED",
            "phase": 1,
            "timestamp": "2025-02-02 12:00:00",
            "error_count": 2,
        }


class TestEvaluationReport:
    """Tests for EvaluationReport."""

    def test_results_in_execution_order(self):
        report = EvaluationReport(
            status=GateStatus.from_error_count(phase=1, error_count=1),
            phase_results=[
                PhaseResult(phase=0, results=[CheckResult.ok("a")]),
                PhaseResult(phase=1, results=[CheckResult.fail("b", "x")]),
            ],
            general_results=[CheckResult.skip("c", "y")],
        )
        assert report.executed_ids == ["a", "b", "c"]
        assert report.skipped_count == 1

    def test_to_json(self):
        report = EvaluationReport(
            status=GateStatus.from_error_count(phase=0, error_count=0),
            project_root=Path("/project"),
        )
        parsed = json.loads(report.to_json())
        assert parsed["schema_name"] == "qualitygates.report"
        assert parsed["gate"]["status"] == "PASSED"
        assert parsed["project_root"] == "/project"


class TestCheckContext:
    def test_path_resolves_against_root(self, tmp_path: Path):
        ctx = CheckContext(project_root=tmp_path, phase=1)
        assert ctx.path("src/Main.php") == tmp_path / "src" / "Main.php"


class TestCheckRegistry:
    """Tests for CheckRegistry."""

    def test_register_check(self):
        """Should register a check."""
        registry = CheckRegistry()
        registry.register("config-files", "Configuration Files", 0, _passing)

        check = registry.get("config-files")
        assert check is not None
        assert isinstance(check, CheckDefinition)
        assert check.title == "Configuration Files"
        assert check.min_phase == 0
        assert len(registry) == 1

    def test_definition_is_immutable(self):
        registry = CheckRegistry()
        check = registry.register("a", "A", 0, _passing)
        with pytest.raises(Exception):
            check.min_phase = 3

    def test_duplicate_id_rejected(self):
        registry = CheckRegistry()
        registry.register("a", "A", 0, _passing)
        with pytest.raises(ValueError, match="already registered"):
            registry.register("a", "A again", 1, _passing)

    def test_negative_phase_rejected(self):
        registry = CheckRegistry()
        with pytest.raises(ValueError):
            registry.register("a", "A", -1, _passing)

    def test_register_with_alias(self):
        """Should resolve aliases to the canonical check."""
        registry = CheckRegistry()
        registry.register("php-standards", "PHP Standards", 1, _passing, aliases=["phpcs"])

        assert registry.get("phpcs").check_id == "php-standards"
        assert "phpcs" in registry

    def test_duplicate_alias_rejected(self):
        registry = CheckRegistry()
        registry.register("a", "A", 0, _passing, aliases=["x"])
        with pytest.raises(ValueError, match="Alias"):
            registry.register("b", "B", 0, _passing, aliases=["x"])

    def test_decorator_registration(self):
        registry = CheckRegistry()

        @registry.check("core-files", "Core PHP Files", min_phase=1)
        def core_files(ctx):
            return True

        assert registry.get("core-files").entrypoint is core_files

    def test_tier_insertion_order(self):
        """Checks keep registration order within a tier."""
        registry = CheckRegistry()
        registry.register("b", "B", 0, _passing)
        registry.register("z", "Z", 1, _passing)
        registry.register("a", "A", 0, _passing)

        assert [c.check_id for c in registry.for_tier(0)] == ["b", "a"]
        assert [c.check_id for c in registry.for_tier(1)] == ["z"]
        assert registry.for_tier(7) == []
        assert registry.tiers() == [0, 1]

    def test_for_phase_is_cumulative(self):
        registry = CheckRegistry()
        registry.register("p2", "P2", 2, _passing)
        registry.register("p0", "P0", 0, _passing)
        registry.register("p1", "P1", 1, _passing)

        assert [c.check_id for c in registry.for_phase(0)] == ["p0"]
        assert [c.check_id for c in registry.for_phase(1)] == ["p0", "p1"]
        assert [c.check_id for c in registry.for_phase(5)] == ["p0", "p1", "p2"]

    def test_tags_stored(self):
        registry = CheckRegistry()
        check = registry.register("a", "A", 0, _passing, tags=["php"])
        assert check.tags == ("php",)

    def test_suggest_similar(self):
        """Should suggest similar check IDs for typos."""
        registry = CheckRegistry()
        registry.register("php-standards", "PHP Standards", 1, _passing)

        assert "php-standards" in registry.suggest_similar("php-standard")

    def test_to_dict(self):
        registry = CheckRegistry()
        check = registry.register("a", "A", 2, _passing, kind="files", tags=["t"])
        d = check.to_dict()
        assert d["check_id"] == "a"
        assert d["min_phase"] == 2
        assert d["kind"] == "files"
        assert d["tags"] == ["t"]
