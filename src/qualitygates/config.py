"""Configuration loading for quality-gates.

Reads quality-gates.yaml from the project root (or an explicit path), validates
it against CONFIG_SCHEMA and merges it over the built-in defaults. The defaults
reproduce the WordPress plugin project's phase gates.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import jsonschema
import yaml

from .common import CONFIG_FILE, STATUS_FILE
from .errors import CONFIG_NOT_FOUND, ConfigurationError
from .gates import checks, scanners
from .gates.registry import CheckDefinition, CheckRegistry

logger = logging.getLogger(__name__)

CHECK_KINDS = ("files", "dirs", "command", "coverage")

_string_list = {"type": "array", "items": {"type": "string"}}

CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "status_file": {"type": "string", "minLength": 1},
        "checks": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "kind"],
                "properties": {
                    "id": {"type": "string", "minLength": 1},
                    "title": {"type": "string"},
                    "description": {"type": "string"},
                    "phase": {"type": "integer", "minimum": 0},
                    "kind": {"enum": list(CHECK_KINDS)},
                    "paths": _string_list,
                    "command": {
                        "oneOf": [
                            {"type": "string", "minLength": 1},
                            {"type": "array", "items": {"type": "string"}, "minItems": 1},
                        ]
                    },
                    "requires": {"type": "string"},
                    "timeout": {"type": "number", "exclusiveMinimum": 0},
                    "report": {"type": "string"},
                    "thresholds": {
                        "type": "object",
                        "additionalProperties": {"type": "integer", "minimum": 0, "maximum": 100},
                    },
                    "tags": _string_list,
                    "aliases": _string_list,
                },
                "additionalProperties": False,
            },
        },
        "debug_scan": {
            "type": "object",
            "properties": {
                "enabled": {"type": "boolean"},
                "patterns": _string_list,
                "roots": _string_list,
                "allow": _string_list,
            },
            "additionalProperties": False,
        },
        "markers": {
            "type": "object",
            "properties": {
                "enabled": {"type": "boolean"},
                "tokens": _string_list,
                "roots": _string_list,
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": False,
}

DEFAULT_CHECKS = [
    {
        "id": "config-files",
        "title": "Configuration Files",
        "phase": 0,
        "kind": "files",
        "paths": ["composer.json", "package.json", "phpunit.xml"],
    },
    {
        "id": "directory-structure",
        "title": "Directory Structure",
        "phase": 0,
        "kind": "dirs",
        "paths": ["scripts"],
    },
    {
        "id": "path-verification",
        "title": "Path Verification",
        "phase": 0,
        "kind": "command",
        "command": ["bash", "scripts/verify-paths.sh", "0"],
    },
    {
        "id": "plugin-activation",
        "title": "Plugin Activation Test",
        "phase": 0,
        "kind": "command",
        "command": ["php", "scripts/test-plugin-activation.php"],
    },
    {
        "id": "core-php-files",
        "title": "Core PHP Files",
        "phase": 1,
        "kind": "files",
        "paths": ["src/Main.php"],
    },
    {
        "id": "php-standards",
        "title": "PHP Standards",
        "phase": 1,
        "kind": "command",
        "command": ["php", "scripts/verify-standards.php", "1"],
    },
    {
        "id": "phpunit",
        "title": "PHPUnit Tests",
        "phase": 1,
        "kind": "command",
        "command": ["vendor/bin/phpunit", "--group", "phase1"],
        "requires": "vendor/bin/phpunit",
    },
    {
        "id": "coverage",
        "title": "Code Coverage",
        "phase": 2,
        "kind": "coverage",
        "report": "coverage/clover.xml",
        "requires": "vendor/bin/phpunit",
    },
]

DEFAULT_SOURCE_ROOTS = ["src", "widget-src"]


@dataclass(frozen=True)
class CheckSpec:
    """One configured check."""

    id: str
    kind: str
    phase: int = 0
    title: str = ""
    description: str = ""
    paths: tuple[str, ...] = ()
    command: Union[str, tuple[str, ...], None] = None
    requires: Optional[str] = None
    timeout: Optional[float] = None
    report: Optional[str] = None
    thresholds: Optional[dict[int, int]] = None
    tags: tuple[str, ...] = ()
    aliases: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "CheckSpec":
        command = data.get("command")
        if isinstance(command, list):
            command = tuple(command)

        thresholds = None
        if "thresholds" in data:
            try:
                thresholds = {int(k): int(v) for k, v in data["thresholds"].items()}
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid coverage thresholds for check {data['id']}: {e}"
                )

        return cls(
            id=data["id"],
            kind=data["kind"],
            phase=data.get("phase", 0),
            title=data.get("title", ""),
            description=data.get("description", ""),
            paths=tuple(data.get("paths", ())),
            command=command,
            requires=data.get("requires"),
            timeout=data.get("timeout"),
            report=data.get("report"),
            thresholds=thresholds,
            tags=tuple(data.get("tags", ())),
            aliases=tuple(data.get("aliases", ())),
        )


@dataclass(frozen=True)
class DebugScanConfig:
    """Forbidden-pattern scan settings."""

    enabled: bool = True
    patterns: tuple[str, ...] = ("var_dump", "console.log")
    roots: tuple[str, ...] = tuple(DEFAULT_SOURCE_ROOTS)
    allow: tuple[str, ...] = ("test", "Test", "debugLog", "Logger")


@dataclass(frozen=True)
class MarkerConfig:
    """Marker-comment count settings."""

    enabled: bool = True
    tokens: tuple[str, ...] = ("TODO", "FIXME", "XXX")
    roots: tuple[str, ...] = tuple(DEFAULT_SOURCE_ROOTS)


@dataclass(frozen=True)
class GateConfig:
    """Resolved configuration for one project."""

    status_file: str = STATUS_FILE
    checks: tuple[CheckSpec, ...] = field(
        default_factory=lambda: tuple(CheckSpec.from_dict(c) for c in DEFAULT_CHECKS)
    )
    debug_scan: DebugScanConfig = field(default_factory=DebugScanConfig)
    markers: MarkerConfig = field(default_factory=MarkerConfig)
    source: Optional[Path] = None  # Config file used, None for defaults

    @classmethod
    def from_dict(cls, data: dict, source: Optional[Path] = None) -> "GateConfig":
        """Validate raw config data and merge it over the defaults.

        Raises:
            ConfigurationError: If the data does not match CONFIG_SCHEMA.
        """
        validate_config(data)
        defaults = cls()

        checks_data = data.get("checks")
        config_checks = (
            defaults.checks
            if checks_data is None
            else tuple(CheckSpec.from_dict(c) for c in checks_data)
        )

        debug_data = data.get("debug_scan", {})
        debug_scan = DebugScanConfig(
            enabled=debug_data.get("enabled", defaults.debug_scan.enabled),
            patterns=tuple(debug_data.get("patterns", defaults.debug_scan.patterns)),
            roots=tuple(debug_data.get("roots", defaults.debug_scan.roots)),
            allow=tuple(debug_data.get("allow", defaults.debug_scan.allow)),
        )

        marker_data = data.get("markers", {})
        markers = MarkerConfig(
            enabled=marker_data.get("enabled", defaults.markers.enabled),
            tokens=tuple(marker_data.get("tokens", defaults.markers.tokens)),
            roots=tuple(marker_data.get("roots", defaults.markers.roots)),
        )

        return cls(
            status_file=data.get("status_file", defaults.status_file),
            checks=config_checks,
            debug_scan=debug_scan,
            markers=markers,
            source=source,
        )


def validate_config(data: Any) -> None:
    """Validate raw config data against CONFIG_SCHEMA.

    Raises:
        ConfigurationError: With the offending location in the message.
    """
    try:
        jsonschema.validate(data, CONFIG_SCHEMA)
    except jsonschema.ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigurationError(
            f"Invalid config at {location}: {e.message}",
            hints=["Check quality-gates.yaml against the documented keys"],
        )

    ids = [c["id"] for c in data.get("checks", [])]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate check ids: {', '.join(duplicates)}")


def load_config(
    path: Optional[Union[str, Path]] = None,
    project_root: Union[str, Path] = ".",
) -> GateConfig:
    """Load configuration.

    Args:
        path: Explicit config file. Must exist when given.
        project_root: Root searched for quality-gates.yaml when no path is given.

    Returns:
        GateConfig; built-in defaults when no config file is found.

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid.
    """
    if path is None:
        candidate = Path(project_root) / CONFIG_FILE
        if not candidate.is_file():
            logger.debug("No %s in %s, using defaults", CONFIG_FILE, project_root)
            return GateConfig()
        path = candidate

    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(
            f"Config file not found: {path}", code=CONFIG_NOT_FOUND
        )

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}")
    except OSError as e:
        raise ConfigurationError(f"Could not read config {path}: {e}")

    logger.debug("Loaded config from %s", path)
    return GateConfig.from_dict(data or {}, source=path)


def _check_fn(spec: CheckSpec):
    if spec.kind == "files":
        return checks.files_exist(spec.id, spec.paths)
    if spec.kind == "dirs":
        return checks.dirs_exist(spec.id, spec.paths)
    if spec.kind == "command":
        if not spec.command:
            raise ConfigurationError(f"Check {spec.id} needs a command")
        return checks.run_command(spec.id, spec.command, spec.requires, spec.timeout)
    if spec.kind == "coverage":
        if not spec.report:
            raise ConfigurationError(f"Check {spec.id} needs a coverage report path")
        return checks.coverage(spec.id, spec.report, spec.requires, spec.thresholds)
    raise ConfigurationError(f"Unknown check kind for {spec.id}: {spec.kind}")


def build_registry(config: GateConfig) -> CheckRegistry:
    """Build the tiered check registry for a config.

    Raises:
        ConfigurationError: On unknown kinds, incomplete specs or duplicate ids.
    """
    registry = CheckRegistry()
    for spec in config.checks:
        try:
            registry.register(
                check_id=spec.id,
                title=spec.title or spec.id,
                min_phase=spec.phase,
                entrypoint=_check_fn(spec),
                description=spec.description,
                kind=spec.kind,
                tags=list(spec.tags),
                aliases=list(spec.aliases),
            )
        except ValueError as e:
            raise ConfigurationError(str(e))
    return registry


def build_general_checks(config: GateConfig) -> list[CheckDefinition]:
    """Cross-cutting checks run once after the phase tiers."""
    general = []
    if config.debug_scan.enabled:
        general.append(
            CheckDefinition(
                check_id=scanners.DEBUG_CODE_ID,
                title="Debug Code",
                min_phase=0,
                entrypoint=scanners.debug_code_check(
                    config.debug_scan.roots,
                    config.debug_scan.patterns,
                    config.debug_scan.allow,
                ),
                description="No forbidden debug statements in the source trees.",
                kind="scan",
            )
        )
    if config.markers.enabled:
        general.append(
            CheckDefinition(
                check_id=scanners.MARKERS_ID,
                title="Unresolved TODOs",
                min_phase=0,
                entrypoint=scanners.marker_check(
                    config.markers.roots,
                    config.markers.tokens,
                ),
                description="Marker comments; counted as an error after phase 0.",
                kind="scan",
            )
        )
    return general
