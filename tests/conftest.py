"""Shared test fixtures."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from recipe_bot.config import Settings

SETTINGS_ENV = (
    "SYSTEM",
    "PR_LABELS",
    "AUTO_MERGE",
    "GH_TOKEN",
    "BASE_BRANCH",
    "PACKAGES",
    "INPUTS",
    "GITHUB_OUTPUT",
    "SMOKE_PACKAGES",
    "README",
    "LOCK_FILE",
    "PACKAGE_DOCS_FLAKE",
    "GITHUB_REPOSITORY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CI environment variables from leaking into Settings."""
    for name in SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings() -> Settings:
    return Settings(gh_token="ghp_test", smoke_packages="")


@pytest.fixture
def lock_path(tmp_path: Path) -> Path:
    """Write a flake.lock with a root node and three inputs."""
    data = {
        "nodes": {
            "root": {"inputs": {"nixpkgs": "nixpkgs", "utils": "utils"}},
            "nixpkgs": {"locked": {"rev": "0123456789abcdef0123"}},
            "utils": {"locked": {"rev": "fedcba9876543210"}},
            "no-rev": {"original": {"type": "github"}},
        },
        "root": "root",
        "version": 7,
    }
    path = tmp_path / "flake.lock"
    path.write_text(json.dumps(data))
    return path
