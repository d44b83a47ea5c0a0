"""Tests for recipe_bot.checks."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, call, patch

import pytest

from recipe_bot.checks import NixFormatter, NixValidator, smoke_packages
from recipe_bot.config import Settings
from recipe_bot.errors import ValidationError
from recipe_bot.models import ItemKind
from recipe_bot.shell import CommandError


class TestSmokePackages:
    def test_setting_wins(self, tmp_path: Path) -> None:
        path = tmp_path / "smokePackages.txt"
        path.write_text("from-file\n")
        assert smoke_packages(Settings(smoke_packages="a b"), path) == ["a", "b"]

    def test_empty_setting_disables_file(self, tmp_path: Path) -> None:
        path = tmp_path / "smokePackages.txt"
        path.write_text("from-file\n")
        assert smoke_packages(Settings(smoke_packages=""), path) == []

    def test_reads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "smokePackages.txt"
        path.write_text("# core tools\nfoo\nbar  # slow\n")
        assert smoke_packages(Settings(), path) == ["foo", "bar"]

    def test_no_file(self, tmp_path: Path) -> None:
        assert smoke_packages(Settings(), tmp_path / "missing.txt") == []


class TestNixValidator:
    @patch("recipe_bot.checks.nix")
    def test_package_checks(self, mock_nix: MagicMock) -> None:
        NixValidator(Settings(system="x86_64-linux")).validate(ItemKind.PACKAGE, "foo")

        assert mock_nix.build_check.call_args_list == [
            call("x86_64-linux", "pkgs-foo"),
            call("x86_64-linux", "pkgs-formatter-check"),
            call("x86_64-linux", "pkgs-formatter-denoCheck"),
        ]
        mock_nix.flake_check.assert_not_called()

    @patch("recipe_bot.checks.nix")
    def test_pinned_reference_checks_with_smoke_build(self, mock_nix: MagicMock) -> None:
        settings = Settings(system="aarch64-linux", smoke_packages="foo bar")

        NixValidator(settings).validate(ItemKind.PINNED_REFERENCE, "nixpkgs")

        mock_nix.flake_check.assert_called_once_with()
        assert mock_nix.build_check.call_args_list == [
            call("aarch64-linux", "pkgs-formatter-check"),
            call("aarch64-linux", "pkgs-formatter-denoCheck"),
            call("aarch64-linux", "pkgs-foo"),
            call("aarch64-linux", "pkgs-bar"),
        ]

    @patch("recipe_bot.checks.nix")
    def test_failure_raises_validation_error(self, mock_nix: MagicMock) -> None:
        mock_nix.build_check.side_effect = CommandError(["nix", "build"], 1)

        with pytest.raises(ValidationError, match="nix build"):
            NixValidator(Settings()).validate(ItemKind.PACKAGE, "foo")


class TestNixFormatter:
    @patch("recipe_bot.checks.nix")
    def test_runs_nix_fmt(self, mock_nix: MagicMock) -> None:
        NixFormatter().format()
        mock_nix.fmt.assert_called_once_with()
