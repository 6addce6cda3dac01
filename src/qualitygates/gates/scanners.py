"""Cross-cutting source scans.

Both scans walk a set of source trees under the project root and run once
per evaluation, independent of the phase tiers:

- debug code: literal forbidden substrings, minus allow-listed hits
- unresolved markers: TODO-style marker lines, only counted past phase 0
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Sequence

from .result import CheckContext, CheckResult

logger = logging.getLogger(__name__)

DEBUG_CODE_ID = "debug-code"
MARKERS_ID = "unresolved-markers"

# Hits listed in result details
MAX_REPORTED_HITS = 20


@dataclass(frozen=True)
class ScanHit:
    """A matching source line."""

    path: str  # Relative to the project root, POSIX separators
    line: int
    text: str

    def __str__(self) -> str:
        return f"{self.path}:{self.text}"

    def to_dict(self) -> dict:
        return {"path": self.path, "line": self.line, "text": self.text}


def iter_source_files(project_root: Path, roots: Sequence[str]) -> Iterator[tuple[Path, str]]:
    """Walk source trees and yield (file_path, relative_path) pairs.

    Missing trees are ignored. Order is deterministic.
    """
    for tree in roots:
        tree_path = project_root / tree
        if tree_path.is_file():
            yield tree_path, Path(tree).as_posix()
            continue
        if not tree_path.is_dir():
            logger.debug("Skipping missing source tree: %s", tree)
            continue

        for root, dirs, files in os.walk(tree_path):
            dirs.sort()
            root_path = Path(root)
            for file in sorted(files):
                file_path = root_path / file
                yield file_path, file_path.relative_to(project_root).as_posix()


def iter_lines(file_path: Path) -> Iterator[tuple[int, str]]:
    """Yield (line_number, text) for a text file; binary files yield nothing."""
    try:
        data = file_path.read_bytes()
    except OSError as e:
        logger.warning("Could not read %s: %s", file_path, e)
        return
    if b"\0" in data:
        return

    text = data.decode("utf-8", errors="replace")
    for i, line in enumerate(text.splitlines(), 1):
        yield i, line


def scan_forbidden(
    project_root: Path,
    roots: Sequence[str],
    patterns: Sequence[str],
    allow: Sequence[str] = (),
) -> list[ScanHit]:
    """Find lines containing any forbidden substring.

    A hit is dropped when "<path>:<line text>" contains any allow-list
    substring, so the allow-list can match file names or line content.
    """
    hits = []
    if not patterns:
        return hits

    for file_path, rel_path in iter_source_files(project_root, roots):
        for lineno, line in iter_lines(file_path):
            if not any(p in line for p in patterns):
                continue
            hit = ScanHit(path=rel_path, line=lineno, text=line)
            if any(a in str(hit) for a in allow):
                continue
            hits.append(hit)

    return hits


def find_markers(
    project_root: Path,
    roots: Sequence[str],
    tokens: Sequence[str],
) -> list[ScanHit]:
    """Find lines containing any marker token."""
    hits = []
    if not tokens:
        return hits

    for file_path, rel_path in iter_source_files(project_root, roots):
        for lineno, line in iter_lines(file_path):
            if any(t in line for t in tokens):
                hits.append(ScanHit(path=rel_path, line=lineno, text=line))

    return hits


def debug_code_check(
    roots: Sequence[str],
    patterns: Sequence[str],
    allow: Sequence[str] = (),
):
    """Fail when forbidden debug code remains in the source trees."""

    def run(ctx: CheckContext) -> CheckResult:
        hits = scan_forbidden(ctx.project_root, roots, patterns, allow)
        logger.debug("Debug scan found %d hits in %s", len(hits), list(roots))
        if hits:
            return CheckResult.fail(
                DEBUG_CODE_ID,
                f"Found debug code in source files ({len(hits)} lines)",
                hits=[h.to_dict() for h in hits[:MAX_REPORTED_HITS]],
            )
        return CheckResult.ok(DEBUG_CODE_ID, "No debug code found")

    return run


def marker_check(roots: Sequence[str], tokens: Sequence[str]):
    """Count marker lines; they only count as an error after phase 0."""

    def run(ctx: CheckContext) -> CheckResult:
        hits = find_markers(ctx.project_root, roots, tokens)
        count = len(hits)
        if count == 0:
            return CheckResult.ok(MARKERS_ID, "No marker comments found", count=0)

        message = f"Found {count} {'/'.join(tokens)} comments"
        details = {
            "count": count,
            "hits": [h.to_dict() for h in hits[:MAX_REPORTED_HITS]],
        }
        # Phase 0 may still carry placeholder markers
        if ctx.phase > 0:
            return CheckResult.fail(MARKERS_ID, message, **details)
        return CheckResult.ok(
            MARKERS_ID, message + " (allowed in phase 0)", warning=True, **details
        )

    return run
