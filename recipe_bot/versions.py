"""Version parsing and ordering utilities.

compare_versions() is a total order over arbitrary version strings: numeric
dot-separated versions compare component-wise, a release ranks after any of
its pre-releases, and anything that does not parse falls back to plain string
comparison. The result depends on the two strings alone.
"""

from __future__ import annotations

import re
from itertools import zip_longest

import semver

from .models import ParsedVersion

_SUFFIX_SEPARATOR = re.compile(r"[-+]")


def parse_version(version: str) -> ParsedVersion:
    """Split a version string into numeric parts and a suffix.

    Examples:
        "v1.2.3" → (1, 2, 3), ""
        "1.0.0-rc1" → (1, 0, 0), "rc1"
        "1.0+build.5" → (1, 0), "build.5"
        "nightly" → None, ""
    """
    normalized = version[1:] if version.startswith("v") else version
    numeric, _, suffix = _split_suffix(normalized)

    if not numeric:
        return ParsedVersion(numeric_parts=None, suffix=suffix)

    parts = numeric.split(".")
    # All-or-nothing: a single non-numeric component voids the whole tuple
    if not all(p.isascii() and p.isdigit() for p in parts):
        return ParsedVersion(numeric_parts=None, suffix=suffix)
    return ParsedVersion(numeric_parts=tuple(int(p) for p in parts), suffix=suffix)


def _split_suffix(version: str) -> tuple[str, str, str]:
    match = _SUFFIX_SEPARATOR.search(version)
    if match is None:
        return version, "", ""
    return version[: match.start()], match.group(), version[match.end() :]


def _cmp(a: object, b: object) -> int:
    return (a > b) - (a < b)  # type: ignore[operator]


def compare_versions(a: str, b: str) -> int:
    """Compare two version strings, returning -1, 0 or 1.

    Missing trailing components count as zero ("1.2" == "1.2.0"). When the
    numeric parts tie, an empty suffix wins over any non-empty one
    ("1.0.0-rc1" < "1.0.0"); two suffixes compare as strings.
    """
    if a == b:
        return 0

    parsed_a = parse_version(a)
    parsed_b = parse_version(b)

    if parsed_a.numeric_parts is None or parsed_b.numeric_parts is None:
        # Non-numeric schemes still need a total order
        return _cmp(a, b)

    for a_part, b_part in zip_longest(
        parsed_a.numeric_parts, parsed_b.numeric_parts, fillvalue=0
    ):
        if a_part != b_part:
            return _cmp(a_part, b_part)

    if parsed_a.suffix == parsed_b.suffix:
        return 0
    if not parsed_a.suffix:
        return 1
    if not parsed_b.suffix:
        return -1
    return _cmp(parsed_a.suffix, parsed_b.suffix)


def should_update(current: str, latest: str) -> bool:
    """Return True if ``latest`` is strictly newer than ``current``."""
    return compare_versions(current, latest) < 0


def to_semver(version: str) -> semver.Version | None:
    """Parse a version into a semver.Version, or None if it isn't semver-like.

    Handles incomplete versions by padding with zeros:
    - "1" → "1.0.0"
    - "1.2" → "1.2.0"
    - "v1.2.3-rc1" → "1.2.3-rc1"
    """
    parsed = parse_version(version)
    if parsed.numeric_parts is None or len(parsed.numeric_parts) > 3:
        return None
    parts = list(parsed.numeric_parts)
    # Pad with zeros to ensure we have exactly 3 parts
    while len(parts) < 3:
        parts.append(0)
    try:
        return semver.Version(*parts, prerelease=parsed.suffix or None)
    except ValueError:
        return None


def bump_kind(old: str, new: str) -> str | None:
    """Classify an update as "major", "minor" or "patch".

    Returns None when either side is not semver-like or ``new`` is not newer.

    Examples:
        "1.2.3" → "2.0.0" gives "major"
        "1.2.3" → "1.3.0" gives "minor"
        "1.2" → "1.2.1" gives "patch"
    """
    old_v = to_semver(old)
    new_v = to_semver(new)
    if old_v is None or new_v is None or not should_update(old, new):
        return None
    if new_v.major != old_v.major:
        return "major"
    if new_v.minor != old_v.minor:
        return "minor"
    return "patch"
