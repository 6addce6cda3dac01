"""Command-line interface for quality-gates.

Exit codes:
    0: All gates passed
    1: At least one gate failed (or an unknown check was requested)
    2: Configuration or usage error
"""

import argparse
import logging
import sys
from pathlib import Path

from .common import PRODUCER
from .config import build_general_checks, build_registry, load_config
from .errors import (
    ConfigurationError,
    check_not_found,
    from_configuration_error,
    internal_error,
    invalid_phase,
    print_error,
    status_not_found,
)
from .gates.evaluator import GateEvaluator, validate_phase
from .status import format_status, read_status_file, write_status_file
from .ui.format import ColorMode, Column, render_json, render_table


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def cmd_show_status(args: argparse.Namespace, status_path: Path) -> int:
    """Handle --show-status."""
    try:
        status = read_status_file(status_path)
    except FileNotFoundError:
        print_error(status_not_found(str(status_path)), json_mode=args.json)
        return 2
    except ValueError as e:
        print_error(internal_error(str(e), {"path": str(status_path)}), json_mode=args.json)
        return 2

    if args.json:
        print(render_json(status.to_dict()))
    else:
        print(format_status(status), end="")
    return status.exit_code


def cmd_list(args: argparse.Namespace, registry, general, phase: int) -> int:
    """Handle --list: checks that would run at a phase."""
    checks = registry.for_phase(phase) + list(general)

    if args.json:
        print(render_json([c.to_dict() for c in checks]))
        return 0

    rows = [
        {"id": c.check_id, "phase": c.min_phase, "kind": c.kind, "title": c.title}
        for c in checks
    ]
    print(render_table(
        rows,
        [
            Column("id", "ID"),
            Column("phase", "PHASE", align="right"),
            Column("kind", "KIND"),
            Column("title", "TITLE"),
        ],
        color_mode=args.color_mode,
    ))
    print(f"\nTotal: {len(checks)} checks for phase {phase}")
    return 0


def cmd_explain(args: argparse.Namespace, registry, general) -> int:
    """Handle --explain CHECK."""
    check = registry.get(args.explain)
    if check is None:
        check = next((c for c in general if c.check_id == args.explain), None)
    if check is None:
        print_error(
            check_not_found(args.explain, registry.suggest_similar(args.explain)),
            json_mode=args.json,
        )
        return 1

    if args.json:
        print(render_json(check.to_dict()))
        return 0

    print(f"Check: {check.check_id}")
    print(f"Title: {check.title}")
    print(f"Kind: {check.kind}")
    print(f"Minimum phase: {check.min_phase}")
    if check.description:
        print("\nDescription:")
        print(f"  {check.description}")
    if check.tags:
        print(f"\nTags: {', '.join(check.tags)}")
    if check.aliases:
        print(f"Aliases: {', '.join(check.aliases)}")
    return 0


def cmd_run(args: argparse.Namespace, registry, general, phase: int, status_path: Path) -> int:
    """Evaluate the gates and write the status file."""
    evaluator = GateEvaluator(
        registry,
        project_root=args.root,
        general_checks=general,
        color_mode=args.color_mode,
        quiet=args.json,
    )
    report = evaluator.run(phase)

    try:
        write_status_file(report.status, status_path)
    except OSError as e:
        print_error(
            internal_error(f"Could not write status file: {e}", {"path": str(status_path)}),
            json_mode=args.json,
        )
        return 2

    if args.json:
        print(render_json(report.to_dict()))
    else:
        print(f"Status file written: {status_path}")
    return report.status.exit_code


def main(argv: list[str] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="gate-evaluator",
        description="Phased quality gate enforcement",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {PRODUCER['version']}"
    )
    parser.add_argument(
        "phase", nargs="?", default="0", help="Target phase (default: 0)"
    )
    parser.add_argument("--root", default=".", help="Project root directory")
    parser.add_argument("--config", help="Config file (default: <root>/quality-gates.yaml)")
    parser.add_argument(
        "--status-file", help="Status file (default: <root>/.quality-gates-status)"
    )
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    parser.add_argument("--no-color", action="store_true", help="Disable color output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--list", action="store_true", help="List checks for the phase")
    mode.add_argument("--explain", metavar="CHECK", help="Explain a check")
    mode.add_argument(
        "--show-status", action="store_true", help="Print the last persisted status"
    )

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    args.color_mode = ColorMode.NEVER if args.no_color else ColorMode.AUTO

    try:
        phase = int(args.phase)
    except ValueError:
        print_error(invalid_phase(args.phase), json_mode=args.json)
        return 2

    root = Path(args.root)
    try:
        config = load_config(args.config, project_root=root)
    except ConfigurationError as e:
        print_error(from_configuration_error(e), json_mode=args.json)
        return 2

    status_path = Path(args.status_file) if args.status_file else root / config.status_file

    if args.show_status:
        return cmd_show_status(args, status_path)

    try:
        registry = build_registry(config)
        general = build_general_checks(config)
        if args.list:
            return cmd_list(args, registry, general, validate_phase(phase))
        if args.explain:
            return cmd_explain(args, registry, general)
        return cmd_run(args, registry, general, phase, status_path)
    except ConfigurationError as e:
        print_error(from_configuration_error(e), json_mode=args.json)
        return 2


if __name__ == "__main__":
    sys.exit(main())
