"""Pull request publishing through the GitHub CLI."""

from __future__ import annotations

import json
from typing import Protocol

from .errors import PublishError
from .models import Proposal
from .shell import gh


class Publisher(Protocol):
    def find_open_pr(self, branch: str) -> int | None:
        """Number of the open pull request whose head is *branch*, if any."""
        ...

    def create(self, proposal: Proposal, base: str, labels: list[str]) -> int | None:
        """Open a pull request; returns its number when it can be determined."""
        ...

    def edit(self, number: int, proposal: Proposal, labels: list[str]) -> None: ...

    def enable_auto_merge(self, number: int) -> None: ...


def _label_args(labels: list[str], flag: str = "--label") -> list[str]:
    args: list[str] = []
    for label in labels:
        args.extend([flag, label])
    return args


class GhPublisher:
    """Publisher backed by ``gh``, authenticated with the configured token."""

    def __init__(self, token: str | None = None) -> None:
        self.env = {"GH_TOKEN": token} if token else None

    def _gh(self, *args: str) -> str:
        return gh(*args, env=self.env)

    def find_open_pr(self, branch: str) -> int | None:
        output = self._gh(
            "pr", "list", "--head", branch, "--state", "open", "--json", "number"
        )
        try:
            prs = json.loads(output or "[]")
        except json.JSONDecodeError as exc:
            raise PublishError(f"gh pr list: invalid JSON: {exc}") from exc
        if not isinstance(prs, list) or not prs:
            return None
        number = prs[0].get("number") if isinstance(prs[0], dict) else None
        return number if isinstance(number, int) else None

    def create(self, proposal: Proposal, base: str, labels: list[str]) -> int | None:
        self._gh(
            "pr",
            "create",
            "--title",
            proposal.title,
            "--body",
            proposal.body,
            "--base",
            base,
            "--head",
            proposal.branch,
            *_label_args(labels),
        )
        return self.find_open_pr(proposal.branch)

    def edit(self, number: int, proposal: Proposal, labels: list[str]) -> None:
        self._gh(
            "pr",
            "edit",
            str(number),
            "--title",
            proposal.title,
            "--body",
            proposal.body,
            *_label_args(labels, "--add-label"),
        )

    def enable_auto_merge(self, number: int) -> None:
        self._gh("pr", "merge", str(number), "--auto", "--squash")
