"""Tests for recipe_bot.versions."""

from __future__ import annotations

import pytest

from recipe_bot.versions import (
    bump_kind,
    compare_versions,
    parse_version,
    should_update,
    to_semver,
)


class TestParseVersion:
    def test_full_version(self) -> None:
        v = parse_version("1.2.3")
        assert v.numeric_parts == (1, 2, 3)
        assert v.suffix == ""

    def test_strips_leading_v(self) -> None:
        assert parse_version("v2.0").numeric_parts == (2, 0)

    def test_prerelease_suffix(self) -> None:
        v = parse_version("1.0.0-rc1")
        assert v.numeric_parts == (1, 0, 0)
        assert v.suffix == "rc1"

    def test_build_suffix(self) -> None:
        v = parse_version("1.0+build.5")
        assert v.numeric_parts == (1, 0)
        assert v.suffix == "build.5"

    def test_splits_at_first_separator_only(self) -> None:
        assert parse_version("1.0-rc1-2").suffix == "rc1-2"
        assert parse_version("1.0+a-b").suffix == "a-b"

    def test_non_numeric_component_voids_all_parts(self) -> None:
        """A single bad component leaves numeric_parts absent, not partial."""
        assert parse_version("1.2.x").numeric_parts is None

    def test_word_version(self) -> None:
        v = parse_version("nightly")
        assert v.numeric_parts is None
        assert v.suffix == ""

    def test_empty_numeric_segment(self) -> None:
        assert parse_version("-rc1").numeric_parts is None
        assert parse_version("").numeric_parts is None


class TestCompareVersions:
    @pytest.mark.parametrize("v", ["1.0.0", "v1", "abc", "", "1.0-rc1", "2024-01-01"])
    def test_identical_strings_are_equal(self, v: str) -> None:
        assert compare_versions(v, v) == 0

    def test_numeric_not_lexicographic(self) -> None:
        assert compare_versions("1.9.0", "1.10.0") < 0
        assert compare_versions("1.10.0", "1.9.0") > 0

    def test_missing_trailing_parts_are_zero(self) -> None:
        assert compare_versions("1.2", "1.2.0") == 0
        assert compare_versions("1.2.0.0", "1.2") == 0

    def test_leading_v_is_ignored_numerically(self) -> None:
        assert compare_versions("v1.2.0", "1.2.0") == 0

    def test_prerelease_ranks_before_release(self) -> None:
        assert compare_versions("1.0.0-rc1", "1.0.0") < 0
        assert compare_versions("1.0.0", "1.0.0-rc1") > 0

    def test_two_suffixes_compare_lexicographically(self) -> None:
        assert compare_versions("1.0.0-alpha", "1.0.0-beta") < 0
        assert compare_versions("1.0.0-rc2", "1.0.0-rc10") > 0

    def test_numeric_parts_win_over_suffix(self) -> None:
        assert compare_versions("1.0.1-rc1", "1.0.0") > 0

    def test_lexicographic_fallback(self) -> None:
        assert compare_versions("abc", "abd") < 0
        assert compare_versions("abd", "abc") > 0

    def test_fallback_when_only_one_side_parses(self) -> None:
        """Falls back to comparing the raw strings, keeping the order total."""
        assert compare_versions("1.0.0", "nightly") < 0
        assert compare_versions("nightly", "1.0.0") > 0

    def test_antisymmetric(self) -> None:
        pairs = [("1.2", "1.3"), ("1.0-a", "1.0"), ("x", "y"), ("1.x", "1.2")]
        for a, b in pairs:
            assert compare_versions(a, b) == -compare_versions(b, a)


class TestShouldUpdate:
    def test_newer_latest(self) -> None:
        assert should_update("1.2.0", "1.3.0")

    def test_same_version(self) -> None:
        assert not should_update("1.2.0", "1.2")

    def test_older_latest(self) -> None:
        assert not should_update("2.0.0", "1.9.9")

    def test_release_after_prerelease(self) -> None:
        assert should_update("1.0.0-rc1", "1.0.0")


class TestToSemver:
    def test_pads_short_versions(self) -> None:
        v = to_semver("1.2")
        assert v is not None
        assert (v.major, v.minor, v.patch) == (1, 2, 0)

    def test_keeps_prerelease(self) -> None:
        v = to_semver("v1.2.3-rc1")
        assert v is not None
        assert v.prerelease == "rc1"

    def test_rejects_four_parts(self) -> None:
        assert to_semver("1.2.3.4") is None

    def test_rejects_non_numeric(self) -> None:
        assert to_semver("nightly") is None


class TestBumpKind:
    def test_major(self) -> None:
        assert bump_kind("1.2.3", "2.0.0") == "major"

    def test_minor(self) -> None:
        assert bump_kind("1.2.3", "1.3.0") == "minor"

    def test_patch(self) -> None:
        assert bump_kind("1.2", "1.2.1") == "patch"

    def test_not_newer(self) -> None:
        assert bump_kind("1.3.0", "1.2.0") is None

    def test_unknown_new_version(self) -> None:
        assert bump_kind("1.2.0", "unknown") is None
