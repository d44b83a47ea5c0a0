"""Candidate discovery: build the matrix of items to update.

Packages come from evaluating the flake's packages for the target platform;
pinned references come from the lock document. Each kind degrades on its
own: a failing query yields no items for that kind but never aborts
discovery as a whole.
"""

from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Protocol

from .config import Settings, split_names, unique_names
from .lockfile import ROOT_NODE, LockFile, short_rev_of
from .models import ItemKind, Matrix, MatrixItem
from .nix import eval_package_versions
from .shell import CommandError, error, step, warn


class PackageIndex(Protocol):
    """Answers "which version does each package have on this platform"."""

    def query_versions(
        self, system: str, names: list[str] | None
    ) -> dict[str, Any]: ...


class LockState(Protocol):
    """Read-only access to the lock-state document."""

    def exists(self) -> bool: ...

    def nodes(self) -> dict[str, Any]: ...


class NixPackageIndex:
    """PackageIndex backed by ``nix eval`` on the current flake."""

    def query_versions(self, system: str, names: list[str] | None) -> dict[str, Any]:
        return eval_package_versions(system, names)


def discover_packages(
    index: PackageIndex, system: str, names: list[str] | None
) -> list[MatrixItem]:
    """Discover packages that carry a version.

    Args:
        index: Package index to query (queried exactly once).
        system: Target platform, e.g. "x86_64-linux".
        names: Explicit package filter, or None for every package.

    Returns:
        Items sorted by name. Names without a version are dropped; with a
        filter, each requested name missing from the result gets a warning.
    """
    print("Discovering packages...")
    if names is not None:
        names = unique_names(names)

    try:
        versions = index.query_versions(system, names)
    except (CommandError, ValueError) as exc:
        # json.JSONDecodeError is a ValueError
        error(f"Failed to evaluate packages:\n{exc}")
        return []

    items: list[MatrixItem] = []
    for name in sorted(versions):
        version = versions[name]
        if isinstance(version, str):
            items.append(
                MatrixItem(type=ItemKind.PACKAGE, name=name, current_version=version)
            )
        elif names is None:
            print(f"  Skipping {name} (no version attribute)")

    if names is not None:
        found = {item.name for item in items}
        for name in names:
            if name not in found:
                warn(f"Package {name} not found or has no version")

    return items


def discover_pinned_references(
    lock_state: LockState, names: list[str] | None
) -> list[MatrixItem]:
    """Discover pinned references from the lock document.

    Args:
        lock_state: The lock document.
        names: Explicit reference filter, or None for every non-root node.

    Returns:
        Items in filter order (or sorted by name when unfiltered), each with
        the locked revision truncated to 8 characters, or "unknown".
        Filtered names absent from the document are skipped silently.
    """
    print("Discovering pinned references...")

    if not lock_state.exists():
        print("  No lock file found, skipping pinned reference updates")
        return []

    try:
        nodes = lock_state.nodes()
    except (OSError, ValueError) as exc:
        error(f"Failed to read lock file:\n{exc}")
        return []

    if names is not None:
        wanted = unique_names(names)
    else:
        wanted = sorted(n for n in nodes if n != ROOT_NODE)

    items: list[MatrixItem] = []
    for name in wanted:
        node = nodes.get(name)
        if node is None:
            continue
        items.append(
            MatrixItem(
                type=ItemKind.PINNED_REFERENCE,
                name=name,
                current_version=short_rev_of(node),
            )
        )
    return items


def discover(
    settings: Settings,
    index: PackageIndex | None = None,
    lock_state: LockState | None = None,
) -> Matrix:
    """Discover every updatable item, packages first.

    Both kinds are read-only queries and run concurrently.
    """
    index = index or NixPackageIndex()
    lock_state = lock_state or LockFile(settings.lock_file)
    package_filter = split_names(settings.packages) or None
    input_filter = split_names(settings.inputs) or None

    step("Discovery configuration")
    print(f"  PACKAGES: {settings.packages.strip() or '<all>'}")
    print(f"  INPUTS: {settings.inputs.strip() or '<all>'}")
    print(f"  SYSTEM: {settings.system}")

    with ThreadPoolExecutor(max_workers=2) as pool:
        packages = pool.submit(discover_packages, index, settings.system, package_filter)
        references = pool.submit(discover_pinned_references, lock_state, input_filter)
        matrix = Matrix(include=[*packages.result(), *references.result()])

    step("Discovery results")
    if matrix.has_items:
        print(f"  Found {len(matrix.include)} item(s) to update")
    else:
        print("  No items to update")
    return matrix


def _write_output(output_path: str, name: str, value: str) -> None:
    with open(output_path, "a") as fh:
        fh.write(f"{name}={value}\n")


def write_outputs(matrix: Matrix, github_output: str | None) -> None:
    """Emit ``matrix`` and ``has_items`` as GitHub step outputs.

    Without an output file the two lines are echoed instead.
    """
    matrix_json = matrix.to_json()
    has_items = json.dumps(matrix.has_items)
    if github_output:
        _write_output(github_output, "matrix", matrix_json)
        _write_output(github_output, "has_items", has_items)
        return

    step("GitHub Actions output format")
    print(f"matrix={matrix_json}")
    print(f"has_items={has_items}")
