"""Data models for recipe-bot.

These Pydantic models represent the values passed between discovery and
the per-item update pipeline. All of them are immutable once built.
"""

from __future__ import annotations

from enum import Enum
from typing import assert_never

from pydantic import BaseModel, ConfigDict, Field, computed_field

__all__ = [
    "ItemKind",
    "Matrix",
    "MatrixItem",
    "ParsedVersion",
    "Proposal",
    "assert_never",
]


class ItemKind(str, Enum):
    """The two kinds of trackable items.

    PACKAGE is a recipe under packages/<name>/; PINNED_REFERENCE is an input
    locked to a revision in the lock document.
    """

    PACKAGE = "package"
    PINNED_REFERENCE = "pinned-reference"

    @classmethod
    def parse(cls, value: str) -> ItemKind:
        """Parse a CLI/matrix value, accepting the legacy "flake-input" tag."""
        if value == "flake-input":
            return cls.PINNED_REFERENCE
        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f"Unknown type '{value}' (expected 'package' or 'pinned-reference')"
            ) from None


class MatrixItem(BaseModel):
    """One unit of update work, as emitted in the CI matrix.

    Attributes:
        type: Which kind of item this is.
        name: Package or reference name, unique per kind.
        current_version: Version (packages) or short locked revision
            (pinned references) at discovery time.
    """

    model_config = ConfigDict(frozen=True)

    type: ItemKind
    name: str
    current_version: str


class Matrix(BaseModel):
    """The discovery result in GitHub Actions matrix shape."""

    model_config = ConfigDict(frozen=True)

    include: list[MatrixItem] = Field(default_factory=list)

    @computed_field
    @property
    def has_items(self) -> bool:
        return len(self.include) > 0

    def to_json(self) -> str:
        """Serialise to the ``{"include": [...]}`` form the workflow consumes."""
        return self.model_dump_json(include={"include"})


class ParsedVersion(BaseModel):
    """A version string split into numeric parts and a suffix.

    Attributes:
        numeric_parts: Dot-separated integers, or None when any component
            is not a number.
        suffix: Text after the first "-" or "+", possibly empty.
    """

    model_config = ConfigDict(frozen=True)

    numeric_parts: tuple[int, ...] | None
    suffix: str = ""


class Proposal(BaseModel):
    """Branch name and pull request text for one update."""

    model_config = ConfigDict(frozen=True)

    branch: str
    title: str
    body: str
