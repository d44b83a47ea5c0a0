"""Tests for recipe_bot.scope."""

from __future__ import annotations

import pytest

from recipe_bot.config import Settings
from recipe_bot.errors import ScopeViolationError
from recipe_bot.models import ItemKind
from recipe_bot.scope import allowed_patterns, check_scope, is_allowed, stage_paths


class TestAllowedPatterns:
    def test_package(self, settings: Settings) -> None:
        assert allowed_patterns(ItemKind.PACKAGE, "foo", settings) == [
            "packages/foo/*",
            "README.md",
        ]

    def test_pinned_reference(self, settings: Settings) -> None:
        assert allowed_patterns(ItemKind.PINNED_REFERENCE, "nixpkgs", settings) == [
            "flake.lock",
            "README.md",
        ]

    def test_follows_configured_paths(self) -> None:
        s = Settings(readme="docs/PACKAGES.md", lock_file="nix/flake.lock")
        assert allowed_patterns(ItemKind.PINNED_REFERENCE, "x", s) == [
            "nix/flake.lock",
            "docs/PACKAGES.md",
        ]


class TestIsAllowed:
    def test_nested_package_file(self) -> None:
        assert is_allowed("packages/foo/sub/dir/hashes.json", ["packages/foo/*"])

    def test_similarly_named_package_is_not_allowed(self) -> None:
        assert not is_allowed("packages/foobar/package.nix", ["packages/foo/*"])

    def test_exact_match(self) -> None:
        assert is_allowed("README.md", ["README.md"])
        assert not is_allowed("docs/README.md", ["README.md"])


class TestCheckScope:
    def test_package_files_pass(self, settings: Settings) -> None:
        check_scope(
            ItemKind.PACKAGE,
            "foo",
            ["packages/foo/package.nix", "packages/foo/hashes.json", "README.md"],
            settings,
        )

    def test_package_touching_lock_fails(self, settings: Settings) -> None:
        with pytest.raises(ScopeViolationError) as excinfo:
            check_scope(
                ItemKind.PACKAGE,
                "foo",
                ["packages/foo/package.nix", "flake.lock"],
                settings,
            )
        assert excinfo.value.path == "flake.lock"
        assert "flake.lock" in str(excinfo.value)

    def test_reports_first_offending_path_in_sorted_order(
        self, settings: Settings
    ) -> None:
        with pytest.raises(ScopeViolationError) as excinfo:
            check_scope(
                ItemKind.PINNED_REFERENCE, "nixpkgs", ["z.txt", "a.txt"], settings
            )
        assert excinfo.value.path == "a.txt"

    def test_pinned_reference_touching_package_fails(self, settings: Settings) -> None:
        with pytest.raises(ScopeViolationError) as excinfo:
            check_scope(
                ItemKind.PINNED_REFERENCE,
                "nixpkgs",
                ["flake.lock", "packages/foo/package.nix"],
                settings,
            )
        assert excinfo.value.path == "packages/foo/package.nix"


class TestStagePaths:
    def test_package(self, settings: Settings) -> None:
        assert stage_paths(ItemKind.PACKAGE, "foo", settings) == [
            "packages/foo",
            "README.md",
        ]

    def test_pinned_reference(self, settings: Settings) -> None:
        assert stage_paths(ItemKind.PINNED_REFERENCE, "nixpkgs", settings) == [
            "flake.lock",
            "README.md",
        ]
