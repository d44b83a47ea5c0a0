"""Formatting and validation of an updated tree.

Validation is kind-specific: a package update builds that package's check,
a pinned-reference update evaluates the whole flake and smoke-builds a
configured set of packages, since any of them may be affected.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from . import nix
from .config import Settings
from .errors import ValidationError
from .models import ItemKind, assert_never
from .shell import CommandError, step
from .updaters import read_args_file

SMOKE_PACKAGES_FILE = Path(".github/smokePackages.txt")
FORMATTER_CHECKS = ("pkgs-formatter-check", "pkgs-formatter-denoCheck")


class Formatter(Protocol):
    def format(self) -> None: ...


class Validator(Protocol):
    def validate(self, kind: ItemKind, name: str) -> None:
        """Raises ValidationError if the updated tree doesn't build/check."""
        ...


class NixFormatter:
    def format(self) -> None:
        nix.fmt()


def smoke_packages(settings: Settings, path: Path = SMOKE_PACKAGES_FILE) -> list[str]:
    """Packages to smoke-build after a pinned-reference update.

    The SMOKE_PACKAGES setting wins, even when empty; otherwise the
    smokePackages.txt file is read (one name per line, ``#`` comments).
    """
    if settings.smoke_packages is not None:
        return settings.smoke_packages.split()
    if not path.is_file():
        return []
    return read_args_file(path)


class NixValidator:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def validate(self, kind: ItemKind, name: str) -> None:
        system = self.settings.system
        try:
            match kind:
                case ItemKind.PACKAGE:
                    nix.build_check(system, f"pkgs-{name}")
                    self._formatter_checks()
                case ItemKind.PINNED_REFERENCE:
                    nix.flake_check()
                    self._formatter_checks()
                    self._smoke_build()
                case _:
                    assert_never(kind)
        except CommandError as exc:
            raise ValidationError(str(exc)) from exc

    def _formatter_checks(self) -> None:
        for check in FORMATTER_CHECKS:
            nix.build_check(self.settings.system, check)

    def _smoke_build(self) -> None:
        packages = smoke_packages(self.settings)
        if not packages:
            return
        step("Smoke build (pinned reference update)")
        print(f"  {' '.join(packages)}")
        for pkg in packages:
            nix.build_check(self.settings.system, f"pkgs-{pkg}")
