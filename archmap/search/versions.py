"""
Version comparison for fleet search.

Versions are compared as ``major.minor[.patch]`` after dropping a leading
``v`` and any pre-release or build suffix, so ``v1.4.0-rc1`` compares equal
to ``1.4``. When either side does not parse, plain string comparison is
used instead.
"""

import operator
import re
from typing import NamedTuple

_SEMVER = re.compile(r"^(\d+)\.(\d+)(?:\.(\d+))?$")

COMPARISONS = {
    "exact": operator.eq,
    "gt": operator.gt,
    "greater": operator.gt,
    "gte": operator.ge,
    "greater_equal": operator.ge,
    "lt": operator.lt,
    "less": operator.lt,
    "lte": operator.le,
    "less_equal": operator.le,
}


class Version(NamedTuple):
    major: int
    minor: int
    patch: int = 0


def parse_version(value: str) -> Version | None:
    """Parse ``value``; ``None`` when it is not a ``major.minor[.patch]`` version."""
    value = value.removeprefix("v")
    value = value.split("-", 1)[0].split("+", 1)[0]
    match = _SEMVER.match(value)
    if not match:
        return None
    major, minor, patch = match.groups()
    return Version(int(major), int(minor), int(patch or 0))


def compare_versions(actual: str, wanted: str, comparison: str = "") -> bool:
    """
    Check ``actual <comparison> wanted``.

    An empty or ``exact`` comparison is string equality. Unknown comparison
    names fall back to equality of the parsed versions.
    """
    if comparison in ("", "exact"):
        return actual == wanted

    op = COMPARISONS.get(comparison, operator.eq)
    left, right = parse_version(actual), parse_version(wanted)
    if left is None or right is None:
        return op(actual, wanted)
    return op(left, right)
