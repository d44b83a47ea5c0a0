"""Change scope: which paths an update of a given kind may touch.

A package update may only change files under ``packages/<name>/`` plus the
generated docs file; a pinned-reference update may only change the lock
document plus the docs file. Anything else aborts the run before commit.
"""

from __future__ import annotations

from fnmatch import fnmatchcase

from .config import Settings
from .errors import ScopeViolationError
from .models import ItemKind, assert_never


def allowed_patterns(kind: ItemKind, name: str, settings: Settings) -> list[str]:
    """Return the fnmatch allow-list for an item."""
    match kind:
        case ItemKind.PACKAGE:
            return [f"packages/{name}/*", settings.readme]
        case ItemKind.PINNED_REFERENCE:
            return [settings.lock_file, settings.readme]
        case _:
            assert_never(kind)


def stage_paths(kind: ItemKind, name: str, settings: Settings) -> list[str]:
    """Pathspecs to ``git add`` when committing an update of this kind."""
    match kind:
        case ItemKind.PACKAGE:
            return [f"packages/{name}", settings.readme]
        case ItemKind.PINNED_REFERENCE:
            return [settings.lock_file, settings.readme]
        case _:
            assert_never(kind)


def is_allowed(path: str, patterns: list[str]) -> bool:
    # fnmatch "*" also matches "/", so "packages/foo/*" covers nested files
    return any(fnmatchcase(path, pattern) for pattern in patterns)


def check_scope(
    kind: ItemKind, name: str, paths: list[str], settings: Settings
) -> None:
    """Verify every touched path is inside the item's allow-list.

    Raises:
        ScopeViolationError: Naming the first offending path (sorted order).
    """
    patterns = allowed_patterns(kind, name, settings)
    for path in sorted(paths):
        if not is_allowed(path, patterns):
            raise ScopeViolationError(
                path,
                f"unexpected change outside allowed scope: {path}\n"
                f"Hint: package updates must only touch packages/{name}/** "
                f"and optionally {settings.readme}\n"
                f"Hint: pinned-reference updates must only touch "
                f"{settings.lock_file} and optionally {settings.readme}",
            )
