"""Branch names and pull request text.

Everything here is a pure function of the item and the two versions, so a
re-run for the same item lands on the same branch and supersedes the
previous pull request instead of opening another one.
"""

from __future__ import annotations

from .config import Settings
from .models import ItemKind, Proposal, assert_never
from .versions import bump_kind


def branch_name(kind: ItemKind, name: str) -> str:
    match kind:
        case ItemKind.PACKAGE:
            return f"update/{name}"
        case ItemKind.PINNED_REFERENCE:
            return f"update/pinned/{name}"
        case _:
            assert_never(kind)


def title(
    kind: ItemKind, name: str, current: str, new: str, lock_file: str = "flake.lock"
) -> str:
    """Pull request title, also used as the commit subject."""
    match kind:
        case ItemKind.PACKAGE:
            return f"{name}: {current} -> {new}"
        case ItemKind.PINNED_REFERENCE:
            return f"{lock_file}: Update {name}"
        case _:
            assert_never(kind)


def body(kind: ItemKind, name: str, current: str, new: str) -> str:
    match kind:
        case ItemKind.PACKAGE:
            text = f"Automated update of {name} from {current} to {new}."
            kind_of_bump = bump_kind(current, new)
            if kind_of_bump:
                text += f"\n\nBump: {kind_of_bump}"
            return text
        case ItemKind.PINNED_REFERENCE:
            return (
                f"This PR updates the pinned reference `{name}`.\n\n"
                f"- {name}: `{current}` → `{new}`"
            )
        case _:
            assert_never(kind)


def build_proposal(
    kind: ItemKind, name: str, current: str, new: str, settings: Settings
) -> Proposal:
    return Proposal(
        branch=branch_name(kind, name),
        title=title(kind, name, current, new, settings.lock_file),
        body=body(kind, name, current, new),
    )
