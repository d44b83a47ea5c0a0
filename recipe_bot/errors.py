"""Error taxonomy for update runs.

Every fatal failure of an update run is an UpdateError subclass carrying the
name of the state that failed, so the CLI can report it without re-running.
"""

from __future__ import annotations


class UpdateError(Exception):
    """Base class for fatal update-run failures.

    Attributes:
        state: Name of the pipeline state that failed, if known.
    """

    def __init__(self, message: str, state: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.state = state

    def __str__(self) -> str:
        if self.state:
            return f"{self.state}: {self.message}"
        return self.message


class ConfigurationError(UpdateError):
    """Required configuration (e.g. the GitHub token) is missing."""


class PreconditionError(UpdateError):
    """The working tree was not clean before the update started."""


class DelegateUpdateError(UpdateError):
    """The external updater for the item failed."""


class ValidationError(UpdateError):
    """Build or check validation of the updated tree failed."""


class ScopeViolationError(UpdateError):
    """A path outside the item's allow-list was touched."""

    def __init__(self, path: str, message: str, state: str | None = None) -> None:
        super().__init__(message, state)
        self.path = path


class PublishError(UpdateError):
    """Creating or editing the pull request failed."""


class AutoMergeError(UpdateError):
    """Requesting auto-merge failed. Reported, never fatal."""


class DocsError(UpdateError):
    """The generated documentation block could not be located or rebuilt."""
