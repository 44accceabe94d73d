"""Resolve values that differ between two otherwise compatible ABI dialects.

Some C libraries always declare both a legacy and a large-file variant of a
type (glibc with ``_LARGEFILE64_SOURCE`` declares ``struct dirent`` and
``struct dirent64``), while others only declare the legacy one (musl). A
directive extracts the same fact from both variants, treating a missing
variant as ``None``, and the rules below decide which dialect is in effect
and which candidate gets baked into the artifact.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from .errors import UnrecognizedDialectError
from .logging import get_logger
from .models import DialectChoice

_LOGGER = get_logger("dialect")

Candidate = Optional[int]


@dataclass(frozen=True)
class DialectRule:
    """A named presence/ordering pattern over ``(legacy, large)`` candidates."""

    name: str
    applies: Callable[[Candidate, Candidate], bool]
    pick: Callable[[Candidate, Candidate], Candidate]
    description: str = ""


def _both_present_ordered(legacy: Candidate, large: Candidate) -> bool:
    return legacy is not None and large is not None and legacy <= large


def _legacy_only(legacy: Candidate, large: Candidate) -> bool:
    return legacy is not None and large is None


def _pick_legacy(legacy: Candidate, large: Candidate) -> Candidate:
    return legacy


LARGEFILE_RULES: Sequence[DialectRule] = (
    DialectRule(
        name="glibc",
        applies=_both_present_ordered,
        pick=_pick_legacy,
        description="legacy and large-file variants declared, legacy <= large-file",
    ),
    DialectRule(
        name="musl",
        applies=_legacy_only,
        pick=_pick_legacy,
        description="only the legacy variant declared",
    ),
)


def select_dialect(
    legacy: Candidate,
    large: Candidate,
    rules: Sequence[DialectRule] = LARGEFILE_RULES,
    *,
    subject: str = "value",
) -> DialectChoice:
    """Return the first rule matching the candidates and the value it bakes in."""
    for rule in rules:
        if not rule.applies(legacy, large):
            continue
        value = rule.pick(legacy, large)
        if value is None:
            raise UnrecognizedDialectError(
                f"Dialect '{rule.name}' selected no value for {subject}"
            )
        _LOGGER.info("Detected %s dialect for %s: %s", rule.name, subject, value)
        return DialectChoice(dialect=rule.name, value=value, candidates=(legacy, large))
    known = ", ".join(rule.name for rule in rules) or "none"
    raise UnrecognizedDialectError(
        f"Unrecognized dialect for {subject}: legacy={legacy}, large-file={large} "
        f"(known dialects: {known})"
    )


__all__ = ["DialectRule", "LARGEFILE_RULES", "select_dialect"]
