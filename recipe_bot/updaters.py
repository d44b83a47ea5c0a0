"""Updaters: the per-kind step that actually changes the working tree.

An updater may rewrite files or decide there is nothing to do; the
orchestrator finds out which by diffing afterwards.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from . import nix
from .errors import DelegateUpdateError
from .lockfile import UNKNOWN, LockFile
from .models import ItemKind, assert_never
from .shell import CommandError, run

NIX_UPDATE_ARGS_FILES = ("nixUpdateArgs", "nix-update-args")


class Updater(Protocol):
    def update(self, name: str, current_version: str, system: str) -> None:
        """Bring *name* up to date in the working tree.

        Raises:
            DelegateUpdateError: If the update tool fails.
        """
        ...

    def resolve_version(self, name: str, system: str) -> str:
        """Best-effort version after the update; "unknown" if unresolvable."""
        ...


def read_args_file(path: Path) -> list[str]:
    """One argument per line; ``#`` comments and blank lines are dropped."""
    args: list[str] = []
    for line in path.read_text().splitlines():
        arg = line.split("#", 1)[0].strip()
        if arg:
            args.append(arg)
    return args


class PackageUpdater:
    """Runs ``packages/<name>/update.py`` if present, else nix-update."""

    def __init__(self, packages_dir: Path | str = "packages") -> None:
        self.packages_dir = Path(packages_dir)

    def nix_update_args(self, name: str) -> list[str]:
        for filename in NIX_UPDATE_ARGS_FILES:
            path = self.packages_dir / name / filename
            if path.is_file():
                return read_args_file(path)
        return []

    def update(self, name: str, current_version: str, system: str) -> None:
        script = self.packages_dir / name / "update.py"
        try:
            if script.is_file():
                print(f"  Running {script}")
                run(str(script), env=nix.NIX_ENV)
            else:
                print(f"  No update.py for {name}; running nix-update")
                nix.nix_update(name, self.nix_update_args(name))
        except CommandError as exc:
            raise DelegateUpdateError(str(exc)) from exc

    def resolve_version(self, name: str, system: str) -> str:
        return nix.eval_package_version(name, system) or UNKNOWN


class PinnedReferenceUpdater:
    """Runs ``nix flake update <name>`` and reads the new locked revision."""

    def __init__(self, lock_file: LockFile | None = None) -> None:
        self.lock_file = lock_file or LockFile()

    def update(self, name: str, current_version: str, system: str) -> None:
        print(f"  Running nix flake update {name}")
        try:
            nix.flake_update(name)
        except CommandError as exc:
            raise DelegateUpdateError(str(exc)) from exc

    def resolve_version(self, name: str, system: str) -> str:
        try:
            return self.lock_file.short_rev(name) or UNKNOWN
        except (OSError, ValueError):
            return UNKNOWN


def select_updater(
    kind: ItemKind, package: Updater, pinned_reference: Updater
) -> Updater:
    match kind:
        case ItemKind.PACKAGE:
            return package
        case ItemKind.PINNED_REFERENCE:
            return pinned_reference
        case _:
            assert_never(kind)
