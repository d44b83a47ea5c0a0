"""Lock-state document access.

The lock document is ``flake.lock``: a JSON object whose ``nodes`` map is
keyed by reference name, each node optionally carrying ``locked.rev``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

ROOT_NODE = "root"
UNKNOWN = "unknown"
SHORT_REV_LENGTH = 8


class LockFile:
    """Read-only view of a lock document on disk."""

    def __init__(self, path: Path | str = "flake.lock") -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def nodes(self) -> dict[str, Any]:
        """Return the ``nodes`` map ({} when the document has none)."""
        data = json.loads(self.path.read_text())
        if not isinstance(data, dict):
            raise ValueError(f"{self.path}: expected a JSON object")
        nodes = data.get("nodes") or {}
        if not isinstance(nodes, dict):
            raise ValueError(f"{self.path}: nodes must be an object")
        return nodes

    def reference_names(self) -> list[str]:
        """All reference names except the root node, sorted."""
        return sorted(name for name in self.nodes() if name != ROOT_NODE)

    def short_rev(self, name: str) -> str | None:
        """Locked revision of *name* truncated to 8 characters.

        Returns:
            The short revision, "unknown" when the node has no string
            ``locked.rev``, or None when the node does not exist at all.
        """
        node = self.nodes().get(name)
        if node is None:
            return None
        return short_rev_of(node)


def short_rev_of(node: Any) -> str:
    locked = node.get("locked") if isinstance(node, dict) else None
    rev = locked.get("rev") if isinstance(locked, dict) else None
    if not isinstance(rev, str) or not rev:
        return UNKNOWN
    return rev[:SHORT_REV_LENGTH]
