"""Check registry for defining and looking up checks.

Checks are grouped by the minimum phase at which they become active and
kept in registration order within each phase tier.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Union
import difflib

from .result import CheckContext, CheckResult

CheckFn = Callable[[CheckContext], Union[CheckResult, bool]]


@dataclass(frozen=True)
class CheckDefinition:
    """Definition of a check in the registry."""

    check_id: str
    title: str
    min_phase: int
    entrypoint: CheckFn
    description: str = ""
    kind: str = "custom"  # files, dirs, command, coverage, custom
    tags: tuple[str, ...] = ()
    aliases: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        """Convert to dictionary for listing."""
        return {
            "check_id": self.check_id,
            "title": self.title,
            "min_phase": self.min_phase,
            "kind": self.kind,
            "description": self.description,
            "tags": list(self.tags),
            "aliases": list(self.aliases),
        }


class CheckRegistry:
    """Ordered registry of checks keyed by phase tier."""

    def __init__(self):
        self._checks: dict[str, CheckDefinition] = {}
        self._tiers: dict[int, list[str]] = {}
        self._aliases: dict[str, str] = {}  # alias -> canonical_id

    def __len__(self) -> int:
        return len(self._checks)

    def __contains__(self, check_id: str) -> bool:
        return self.get(check_id) is not None

    def register(
        self,
        check_id: str,
        title: str,
        min_phase: int,
        entrypoint: CheckFn,
        description: str = "",
        kind: str = "custom",
        tags: Optional[list[str]] = None,
        aliases: Optional[list[str]] = None,
    ) -> CheckDefinition:
        """Register a check.

        Args:
            check_id: Canonical check identifier (e.g., config-files).
            title: Name printed on the PASSED/FAILED line.
            min_phase: First phase at which the check runs.
            entrypoint: Callable that executes the check.
            description: Full description with pass criteria.
            kind: Check kind used by the config loader.
            tags: Categorization tags.
            aliases: Optional short aliases.

        Returns:
            The registered definition.

        Raises:
            ValueError: On duplicate IDs or aliases, or a negative phase.
        """
        if check_id in self._checks or check_id in self._aliases:
            raise ValueError(f"Check already registered: {check_id}")
        if isinstance(min_phase, bool) or not isinstance(min_phase, int) or min_phase < 0:
            raise ValueError(f"Invalid phase for check {check_id}: {min_phase!r}")

        check = CheckDefinition(
            check_id=check_id,
            title=title,
            min_phase=min_phase,
            entrypoint=entrypoint,
            description=description,
            kind=kind,
            tags=tuple(tags or ()),
            aliases=tuple(aliases or ()),
        )

        for alias in check.aliases:
            if alias in self._aliases or alias in self._checks:
                raise ValueError(f"Alias already registered: {alias}")

        self._checks[check_id] = check
        self._tiers.setdefault(min_phase, []).append(check_id)
        for alias in check.aliases:
            self._aliases[alias] = check_id

        return check

    def check(
        self,
        check_id: str,
        title: str,
        min_phase: int = 0,
        **kwargs,
    ) -> Callable[[CheckFn], CheckFn]:
        """Decorator to register a check function.

        Usage:
            @registry.check("core-files", "Core PHP Files", min_phase=1)
            def core_files(ctx: CheckContext) -> CheckResult:
                ...
        """

        def decorator(func: CheckFn) -> CheckFn:
            self.register(check_id, title, min_phase, func, **kwargs)
            return func

        return decorator

    def get(self, check_id_or_alias: str) -> Optional[CheckDefinition]:
        """Get a check by ID or alias.

        Returns:
            CheckDefinition or None if not found.
        """
        if check_id_or_alias in self._checks:
            return self._checks[check_id_or_alias]

        canonical_id = self._aliases.get(check_id_or_alias)
        if canonical_id:
            return self._checks.get(canonical_id)

        return None

    def tiers(self) -> list[int]:
        """Phase tiers that have at least one check, ascending."""
        return sorted(self._tiers)

    def for_tier(self, tier: int) -> list[CheckDefinition]:
        """Checks registered at exactly this tier, in registration order."""
        return [self._checks[cid] for cid in self._tiers.get(tier, [])]

    def for_phase(self, phase: int) -> list[CheckDefinition]:
        """Checks active at a phase: every tier up to and including it."""
        checks = []
        for tier in self.tiers():
            if tier > phase:
                break
            checks.extend(self.for_tier(tier))
        return checks

    def suggest_similar(self, unknown_id: str, limit: int = 3) -> list[str]:
        """Suggest similar check IDs for typos."""
        all_ids = list(self._checks.keys()) + list(self._aliases.keys())
        return difflib.get_close_matches(unknown_id, all_ids, n=limit, cutoff=0.4)
