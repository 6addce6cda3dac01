"""Tests for error handling module.

Tests verify:
- Exception types carry their codes and context
- Error envelope structure is correct
- Factory functions produce correct errors
- JSON output is valid against the error schema
"""

import json
import pytest
from io import StringIO
from pathlib import Path

import jsonschema

from qualitygates.errors import (
    CHECK_NOT_FOUND,
    CONFIG_INVALID,
    CONFIG_NOT_FOUND,
    INTERNAL_ERROR,
    INVALID_PHASE,
    REGISTRY_EMPTY,
    STATUS_NOT_FOUND,
    CheckFailure,
    ConfigurationError,
    GateError,
    QualityGatesError,
    ToolUnavailable,
    check_not_found,
    config_not_found,
    from_configuration_error,
    internal_error,
    invalid_phase,
    print_error,
    status_not_found,
)


ERROR_SCHEMA = json.loads(
    (Path(__file__).parent.parent / "schemas" / "error.schema.json").read_text()
)


class TestExceptions:
    def test_hierarchy(self):
        for exc in (ConfigurationError("x"), CheckFailure("x"), ToolUnavailable("php")):
            assert isinstance(exc, QualityGatesError)

    def test_configuration_error_defaults(self):
        exc = ConfigurationError("bad")
        assert exc.code == CONFIG_INVALID
        assert exc.hints == []
        assert str(exc) == "bad"

    def test_configuration_error_code_and_hints(self):
        exc = ConfigurationError("Phase must be >= 0, got -1", code=INVALID_PHASE, hints=("h",))
        assert exc.code == INVALID_PHASE
        assert exc.hints == ["h"]

    def test_check_failure_details(self):
        assert CheckFailure("boom").details == {}
        assert CheckFailure("boom", {"line": 3}).details == {"line": 3}

    def test_tool_unavailable_message(self):
        exc = ToolUnavailable("vendor/bin/phpunit")
        assert exc.tool == "vendor/bin/phpunit"
        assert str(exc) == "Tool not available: vendor/bin/phpunit"
        assert str(ToolUnavailable("php", "php is not installed")) == "php is not installed"


class TestGateError:
    def test_to_dict_structure(self):
        error = GateError(
            code="TEST_ERROR",
            message="Test message",
            hints=["Hint 1", "Hint 2"],
            details={"key": "value"},
        )

        result = error.to_dict()

        assert result == {
            "error": {
                "code": "TEST_ERROR",
                "message": "Test message",
                "hints": ["Hint 1", "Hint 2"],
                "details": {"key": "value"},
            }
        }

    def test_empty_hints_and_details(self):
        result = GateError(code="TEST_ERROR", message="m").to_dict()
        assert result["error"]["hints"] == []
        assert result["error"]["details"] == {}

    def test_to_json_parses(self):
        error = GateError(code="TEST_ERROR", message="m")
        assert json.loads(error.to_json()) == error.to_dict()

    def test_print_text(self):
        out = StringIO()
        GateError(code="X", message="Broken", hints=["Try again"]).print_text(out)
        assert out.getvalue() == "Error: Broken\n  Hint: Try again\n"


class TestFactories:
    @pytest.mark.parametrize("error,code", [
        (invalid_phase("abc"), INVALID_PHASE),
        (config_not_found("gates.yaml"), CONFIG_NOT_FOUND),
        (check_not_found("lint"), CHECK_NOT_FOUND),
        (status_not_found(".quality-gates-status"), STATUS_NOT_FOUND),
        (internal_error("oops"), INTERNAL_ERROR),
    ])
    def test_codes_and_schema(self, error, code):
        assert error.code == code
        assert error.message
        assert error.hints
        jsonschema.validate(error.to_dict(), ERROR_SCHEMA)

    def test_invalid_phase_details(self):
        error = invalid_phase("two")
        assert error.message == "Invalid phase: two"
        assert error.details == {"phase": "two"}

    def test_check_not_found_suggestions(self):
        error = check_not_found("phpunt", ["phpunit"])
        assert error.hints[0] == "Did you mean: phpunit?"
        assert "Run: gate-evaluator --list" in error.hints

    def test_check_not_found_without_suggestions(self):
        assert check_not_found("x").hints == ["Run: gate-evaluator --list"]

    def test_from_configuration_error(self):
        exc = ConfigurationError("No checks registered", code=REGISTRY_EMPTY, hints=["add one"])
        error = from_configuration_error(exc)
        assert error.code == REGISTRY_EMPTY
        assert error.message == "No checks registered"
        assert error.hints == ["add one"]
        jsonschema.validate(error.to_dict(), ERROR_SCHEMA)

    def test_internal_error_prefix(self):
        assert internal_error("disk full").message == "Internal error: disk full"


class TestPrintError:
    def test_json_mode(self):
        out = StringIO()
        print_error(status_not_found("s"), json_mode=True, file=out)
        assert json.loads(out.getvalue())["error"]["code"] == STATUS_NOT_FOUND

    def test_text_mode(self):
        out = StringIO()
        print_error(status_not_found("s"), file=out)
        assert out.getvalue().startswith("Error: Status file not found: s")

    def test_defaults_to_stderr(self, capsys):
        print_error(invalid_phase("x"))
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Invalid phase: x" in captured.err
