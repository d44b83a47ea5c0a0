"""Update pipeline: precondition → update → diff → docs → format → diff →
version → validate → scope → commit → publish → auto-merge.

One UpdateOrchestrator turns one MatrixItem into a validated, scope-checked
pull request:

1. Refuse to start on a dirty working tree
2. Run the item's updater
3. Stop successfully if nothing changed
4. Regenerate the README docs block and format the repository
5. Stop successfully if formatting cancelled the change
6. Resolve the new version (for reporting only)
7. Build/check the result
8. Make sure only allow-listed paths were touched
9. Commit to a deterministic branch and force-push it
10. Create the pull request, or edit the one already open for the branch
11. Optionally request auto-merge

Every state depends on the tree left by the previous one, so the run is
strictly sequential. A fatal error aborts the run; callers re-run the whole
pipeline rather than resuming it.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum

from pydantic import BaseModel, ConfigDict

from .checks import Formatter, NixFormatter, NixValidator, Validator
from .config import Settings
from .docs import DocsRegenerator, ReadmeDocs
from .errors import (
    AutoMergeError,
    DelegateUpdateError,
    PreconditionError,
    PublishError,
    UpdateError,
    ValidationError,
)
from .github import GhPublisher, Publisher
from .lockfile import UNKNOWN, LockFile
from .models import MatrixItem, Proposal
from .proposal import build_proposal
from .scope import check_scope, stage_paths
from .shell import CommandError, step
from .updaters import PackageUpdater, PinnedReferenceUpdater, Updater, select_updater
from .worktree import GitWorkingTree, WorkingTree


class State(str, Enum):
    CONFIGURED = "Configured"
    PRECONDITION_CHECKED = "PreconditionChecked"
    UPDATED = "Updated"
    DIFF_CHECKED = "DiffChecked"
    DOCS_REGENERATED = "DocsRegenerated"
    FORMATTED = "Formatted"
    DIFF_CHECKED_AFTER_FORMAT = "DiffCheckedAfterFormat"
    VERSION_RESOLVED = "VersionResolved"
    VALIDATED = "Validated"
    SCOPE_CHECKED = "ScopeChecked"
    COMMITTED = "Committed"
    PUBLISHED = "Published"
    AUTO_MERGE_REQUESTED = "AutoMergeRequested"


class RunOutcome(str, Enum):
    PUBLISHED = "published"
    NO_CHANGES = "no-changes"
    NO_CHANGES_AFTER_FORMAT = "no-changes-after-format"


class RunResult(BaseModel):
    """How a successful run ended.

    Attributes:
        outcome: Published, or one of the two no-op terminations.
        state: Last state reached.
        new_version: Resolved version (None for no-op runs).
        proposal: Branch/title/body that was published, if any.
        pr_number: Number of the created or edited pull request, if known.
    """

    model_config = ConfigDict(frozen=True)

    outcome: RunOutcome
    state: State
    new_version: str | None = None
    proposal: Proposal | None = None
    pr_number: int | None = None


class UpdateOrchestrator:
    """Runs the update pipeline for a single item against a single tree."""

    def __init__(
        self,
        item: MatrixItem,
        settings: Settings,
        *,
        tree: WorkingTree,
        package_updater: Updater,
        pinned_reference_updater: Updater,
        docs: DocsRegenerator,
        formatter: Formatter,
        validator: Validator,
        publisher: Publisher,
    ) -> None:
        self.item = item
        self.settings = settings
        self.tree = tree
        self.updater = select_updater(
            item.type, package_updater, pinned_reference_updater
        )
        self.docs = docs
        self.formatter = formatter
        self.validator = validator
        self.publisher = publisher
        self.state: State | None = None

    @classmethod
    def for_repository(cls, item: MatrixItem, settings: Settings) -> UpdateOrchestrator:
        """Wire the real git/gh/nix collaborators for the current directory."""
        return cls(
            item,
            settings,
            tree=GitWorkingTree(),
            package_updater=PackageUpdater(),
            pinned_reference_updater=PinnedReferenceUpdater(
                LockFile(settings.lock_file)
            ),
            docs=ReadmeDocs(settings),
            formatter=NixFormatter(),
            validator=NixValidator(settings),
            publisher=GhPublisher(settings.gh_token),
        )

    @contextmanager
    def _enter(
        self, state: State, error_cls: type[UpdateError] = UpdateError
    ) -> Iterator[None]:
        """Run one state, tagging any failure with the state's name."""
        self.state = state
        try:
            yield
        except UpdateError as exc:
            if exc.state is None:
                exc.state = state.value
            raise
        except (CommandError, OSError) as exc:
            raise error_cls(str(exc), state=state.value) from exc

    def run(self) -> RunResult:
        """Execute the pipeline.

        Returns:
            RunResult describing a publish or a no-op termination.

        Raises:
            UpdateError: A subclass naming the failed state.
        """
        item = self.item

        with self._enter(State.CONFIGURED):
            self.settings.require_token()

        with self._enter(State.PRECONDITION_CHECKED, PreconditionError):
            self.check_clean_tree()

        step("Update target")
        print(f"  type={item.type.value}")
        print(f"  name={item.name}")
        print(f"  system={self.settings.system}")
        print(f"  current_version={item.current_version}")

        with self._enter(State.UPDATED, DelegateUpdateError):
            self.updater.update(item.name, item.current_version, self.settings.system)

        with self._enter(State.DIFF_CHECKED):
            if not self.tree.has_changes():
                print("\nNo changes detected; skipping PR.")
                return RunResult(outcome=RunOutcome.NO_CHANGES, state=self.state)

        with self._enter(State.DOCS_REGENERATED):
            print("Regenerating README package docs (if needed)...")
            self.docs.regenerate()

        with self._enter(State.FORMATTED):
            print("Formatting repository...")
            self.formatter.format()

        with self._enter(State.DIFF_CHECKED_AFTER_FORMAT):
            if not self.tree.has_changes():
                print("\nNo changes detected after formatting; skipping PR.")
                return RunResult(
                    outcome=RunOutcome.NO_CHANGES_AFTER_FORMAT, state=self.state
                )

        with self._enter(State.VERSION_RESOLVED):
            new_version = self.resolve_version()

        with self._enter(State.VALIDATED, ValidationError):
            step("Validation")
            self.validator.validate(item.type, item.name)

        with self._enter(State.SCOPE_CHECKED):
            self.check_scope()

        proposal = build_proposal(
            item.type, item.name, item.current_version, new_version, self.settings
        )

        with self._enter(State.COMMITTED):
            self.commit(proposal)

        with self._enter(State.PUBLISHED, PublishError):
            pr_number = self.publish(proposal)

        if self.settings.auto_merge and pr_number is not None:
            self.state = State.AUTO_MERGE_REQUESTED
            self.request_auto_merge(pr_number)

        print(f"\n{'=' * 60}\nDone!\n{'=' * 60}")
        return RunResult(
            outcome=RunOutcome.PUBLISHED,
            state=self.state,
            new_version=new_version,
            proposal=proposal,
            pr_number=pr_number,
        )

    def check_clean_tree(self) -> None:
        status = self.tree.status()
        if status:
            raise PreconditionError(
                "working tree is not clean before update\n" + "\n".join(status)
            )

    def resolve_version(self) -> str:
        """Never fatal: anything that goes wrong reports "unknown"."""
        try:
            version = self.updater.resolve_version(self.item.name, self.settings.system)
        except (CommandError, OSError, ValueError):
            version = UNKNOWN
        return version or UNKNOWN

    def check_scope(self) -> None:
        paths = self.tree.changed_paths()
        if not paths:
            raise UpdateError("expected changes but working tree is clean")

        step("Worktree changes")
        for path in paths:
            print(f"  {path}")

        check_scope(self.item.type, self.item.name, paths, self.settings)

    def commit(self, proposal: Proposal) -> None:
        step("Create/Update PR")
        print(f"  branch={proposal.branch}")
        print(f"  title={proposal.title}")

        self.tree.switch_branch(proposal.branch)
        self.tree.stage(stage_paths(self.item.type, self.item.name, self.settings))
        if not self.tree.has_staged():
            raise UpdateError("nothing staged for commit")
        self.tree.commit(proposal.title)
        self.tree.force_push(proposal.branch)

    def publish(self, proposal: Proposal) -> int | None:
        """Edit the open pull request for the branch, or create one."""
        labels = self.settings.labels
        number = self.publisher.find_open_pr(proposal.branch)
        if number is not None:
            print(f"  Updating existing PR #{number}")
            self.publisher.edit(number, proposal, labels)
            return number

        print("  Creating new PR")
        return self.publisher.create(proposal, self.settings.base_branch, labels)

    def request_auto_merge(self, pr_number: int) -> None:
        """Failures here are reported and otherwise ignored."""
        print(f"  Enabling auto-merge for PR #{pr_number}")
        try:
            self.publisher.enable_auto_merge(pr_number)
        except (CommandError, AutoMergeError) as exc:
            print(f"  Note: auto-merge may require branch protection rules ({exc})")


def run_update(item: MatrixItem, settings: Settings) -> RunResult:
    """Run the pipeline for *item* in the current directory."""
    return UpdateOrchestrator.for_repository(item, settings).run()
