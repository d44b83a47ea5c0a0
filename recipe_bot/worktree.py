"""Git working tree operations used by an update run.

One WorkingTree is owned by exactly one run at a time: the clean-tree
precondition and path diffing are only meaningful under that exclusivity.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from .shell import git, git_status, trim_lines


class WorkingTree(Protocol):
    def status(self) -> list[str]:
        """Porcelain status lines; empty means clean."""
        ...

    def has_changes(self) -> bool:
        """True if any tracked file differs or an untracked file appeared."""
        ...

    def changed_paths(self) -> list[str]:
        """Sorted union of modified tracked files and untracked files."""
        ...

    def switch_branch(self, branch: str) -> None: ...

    def stage(self, paths: list[str]) -> None: ...

    def has_staged(self) -> bool: ...

    def commit(self, message: str) -> None: ...

    def force_push(self, branch: str) -> None: ...


class GitWorkingTree:
    """WorkingTree for the git checkout in the current directory."""

    def status(self) -> list[str]:
        return trim_lines(git("status", "--porcelain"))

    def has_changes(self) -> bool:
        # Counts untracked files too, the same set changed_paths() reports
        return bool(self.status())

    def changed_paths(self) -> list[str]:
        changed = trim_lines(git("diff", "--name-only"))
        untracked = trim_lines(git("ls-files", "--others", "--exclude-standard"))
        return sorted(set(changed) | set(untracked))

    def switch_branch(self, branch: str) -> None:
        # -C resets an existing local branch so re-runs start from HEAD
        git("switch", "-C", branch)

    def stage(self, paths: list[str]) -> None:
        # git add fails on a pathspec matching nothing on disk or in the index,
        # e.g. packages/<name> for a recipe that is neither present nor tracked.
        # A tracked file the updater deleted still matches and is staged.
        existing = [p for p in paths if Path(p).exists() or git("ls-files", "--", p)]
        if existing:
            git("add", "--all", "--", *existing)

    def has_staged(self) -> bool:
        return git_status("diff", "--cached", "--quiet") != 0

    def commit(self, message: str) -> None:
        git("commit", "-m", message, "--signoff")

    def force_push(self, branch: str) -> None:
        git("push", "--force", "--set-upstream", "origin", branch)
