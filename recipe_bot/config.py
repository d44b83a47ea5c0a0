"""Unified settings: CLI flags, env vars and an optional TOML file.

Priority chain (highest to lowest):
  1. Init kwargs: CLI flags passed by Click
  2. Env vars: the names the CI workflow already exports (SYSTEM,
     PR_LABELS, AUTO_MERGE, GH_TOKEN, ...)
  3. TOML file: ``.github/recipe-bot.toml`` in the repository
  4. Code defaults

The resulting object is frozen and passed explicitly to discovery and to the
update orchestrator; nothing else reads the process environment.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .errors import ConfigurationError
from .toml import get_section, load_toml

DEFAULT_CONFIG_PATH = Path(".github/recipe-bot.toml")
DEFAULT_SYSTEM = "x86_64-linux"
DEFAULT_LABELS = "dependencies,automated"


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from the repository's TOML config file, if present."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            self._data = get_section(load_toml(toml_path))

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return {k: v for k, v in self._data.items() if k in self.settings_cls.model_fields}


# Thread-local storage for the TOML path during construction.
_tls = threading.local()


class Settings(BaseSettings):
    """Process configuration for discovery and update runs.

    Attributes:
        system: Nix platform whose packages are discovered and built.
        pr_labels: Comma-separated labels applied to pull requests.
        auto_merge: Request auto-merge after publishing.
        gh_token: GitHub credential; required by ``update``.
        base_branch: Branch pull requests target.
        packages: Whitespace-separated package filter ("" means all).
        inputs: Whitespace-separated pinned-reference filter ("" means all).
        github_output: GitHub Actions step output file, if running in CI.
        smoke_packages: Packages to build after a pinned-reference update.
            None means read ``.github/smokePackages.txt``.
        readme: Document holding the generated package docs block.
        lock_file: Lock-state document for pinned references.
        package_docs_flake: Flake reference used in generated usage lines.
        github_repository: ``owner/repo`` as exported by GitHub Actions.
    """

    model_config = SettingsConfigDict(frozen=True, extra="ignore")

    system: str = DEFAULT_SYSTEM
    pr_labels: str = DEFAULT_LABELS
    auto_merge: bool = False
    gh_token: str | None = None
    base_branch: str = "main"
    packages: str = ""
    inputs: str = ""
    github_output: str | None = None
    smoke_packages: str | None = None
    readme: str = "README.md"
    lock_file: str = "flake.lock"
    package_docs_flake: str | None = None
    github_repository: str | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def load(cls, config_path: Path | None = None, **overrides: Any) -> Settings:
        """Construct settings, merging *overrides* (CLI flags) on top.

        Overrides whose value is None are ignored so unset CLI options fall
        through to the environment.
        """
        _tls.toml_path = config_path or DEFAULT_CONFIG_PATH
        try:
            return cls(**{k: v for k, v in overrides.items() if v is not None})
        finally:
            _tls.toml_path = None

    @property
    def labels(self) -> list[str]:
        """pr_labels split on commas, blanks dropped."""
        return split_labels(self.pr_labels)

    def require_token(self) -> str:
        """Return the GitHub token or raise ConfigurationError."""
        if not self.gh_token:
            raise ConfigurationError("GH_TOKEN is not set")
        return self.gh_token


def split_labels(labels: str) -> list[str]:
    """Split a comma-separated label list, trimming and dropping blanks."""
    return [label.strip() for label in labels.split(",") if label.strip()]


def split_names(names: str) -> list[str]:
    """Split a whitespace-separated name filter, dropping repeats (first wins)."""
    return unique_names(names.split())


def unique_names(names: list[str]) -> list[str]:
    return list(dict.fromkeys(names))
