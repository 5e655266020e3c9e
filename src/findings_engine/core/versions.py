"""Version range algebra over npm-style constraint strings.

Constraints use ``>=``, ``>``, ``<=``, ``<``, ``=`` or a bare version;
comparators separated by whitespace form a conjunction and ``||`` separates
alternatives. ``*`` or an empty constraint matches every version. Versions
are ordered by semantic-version precedence (``semver``), so ``1.0.0-rc.1``
sorts below ``1.0.0`` and prereleases take part in ranges like any other
version. Candidate versions that do not parse are excluded.
"""

from __future__ import annotations

import operator
import re
from typing import Callable, Iterable

from semver import Version

Comparator = tuple[Callable[[Version, Version], bool], Version]

_COMPARATOR = re.compile(r"\s*(>=|<=|>|<|=)?\s*v?([^\s<>=|]+)\s*")
_OPERATORS = {">=": operator.ge, "<=": operator.le, ">": operator.gt, "<": operator.lt, "=": operator.eq}
_ZERO = Version(0, 0, 0)


def parse(value: str | None) -> Version | None:
    """Parse ``value`` as a semantic version; ``v`` prefix and a missing
    minor/patch are tolerated. Returns None when it does not parse."""
    if not value:
        return None
    try:
        return Version.parse(value.strip().lstrip("v"), optional_minor_and_patch=True)
    except (ValueError, TypeError):
        return None


def _parse_alternative(text: str) -> list[Comparator] | None:
    """Translate one conjunction (``>=1.0.0 <2.0.0``) into comparators.

    An empty list matches everything; None means the alternative is malformed.
    """
    text = text.strip()
    if text in ("", "*"):
        return []
    comparators: list[Comparator] = []
    pos = 0
    while pos < len(text):
        match = _COMPARATOR.match(text, pos)
        if match is None or match.end() == pos:
            return None
        version = parse(match.group(2))
        if version is None:
            return None
        comparators.append((_OPERATORS[match.group(1) or "="], version))
        pos = match.end()
    return comparators


def _parse_constraint(constraint: str | None) -> list[list[Comparator]]:
    if constraint is None:
        return [[]]
    parsed = [_parse_alternative(alt) for alt in constraint.split("||")]
    return [alt for alt in parsed if alt is not None]


def _matches(version: Version, alternatives: list[list[Comparator]]) -> bool:
    return any(all(op(version, bound) for op, bound in alt) for alt in alternatives)


def satisfies(version: str, constraint: str | None) -> bool:
    candidate = parse(version)
    if candidate is None:
        return False
    return _matches(candidate, _parse_constraint(constraint))


def versions_satisfying_constraint(all_versions: Iterable[str], constraint: str | None) -> list[str]:
    """Return the candidates matching ``constraint``, in input order."""
    alternatives = _parse_constraint(constraint)
    result: list[str] = []
    for version in all_versions:
        candidate = parse(version)
        if candidate is not None and _matches(candidate, alternatives):
            result.append(version)
    return result


def versions_satisfying(
    all_versions: Iterable[str],
    lower: str | None = None,
    upper: str | None = None,
    lower_inclusive: bool = True,
    upper_inclusive: bool = False,
) -> list[str]:
    """Return the candidates within ``[lower, upper)`` (inclusivity configurable).

    An absent bound is unbounded on that side.
    """
    parts: list[str] = []
    if lower:
        parts.append(f"{'>=' if lower_inclusive else '>'}{lower}")
    if upper:
        parts.append(f"{'<=' if upper_inclusive else '<'}{upper}")
    return versions_satisfying_constraint(all_versions, " ".join(parts))


def version_key(version: str) -> Version:
    """Sort key for version strings; unparsable versions order as ``0.0.0``."""
    parsed = parse(version)
    return parsed if parsed is not None else _ZERO


def compare_versions(a: str, b: str) -> int:
    return version_key(a).compare(version_key(b))


def sort_versions(versions: Iterable[str], reverse: bool = False) -> list[str]:
    return sorted(versions, key=version_key, reverse=reverse)
