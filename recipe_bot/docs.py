"""Generated package documentation.

The README carries a block between two literal markers. Regeneration
rewrites only the text strictly between them, leaving everything outside
untouched, and is a no-op when the packages haven't changed.
"""

from __future__ import annotations

import re
from json import JSONDecodeError
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from . import nix
from .config import Settings
from .errors import DocsError
from .shell import CommandError, git

BEGIN_MARKER = "<!-- BEGIN GENERATED PACKAGE DOCS -->"
END_MARKER = "<!-- END GENERATED PACKAGE DOCS -->"

CATEGORY_ORDER = (
    "AI Coding Agents",
    "Codex Ecosystem",
    "Workflow & Project Management",
    "Code Review",
    "Utilities",
    "Uncategorized",
)

METADATA_EXPR = """
let
  system = builtins.getEnv "DOCS_SYSTEM";
  flake = builtins.getFlake (toString ./.);
  pkgs = flake.packages.${system};
  licenseName = l:
    if builtins.isList l then builtins.concatStringsSep ", " (map licenseName l)
    else if builtins.isAttrs l then (l.spdxId or l.shortName or "unknown")
    else toString l;
in
  builtins.mapAttrs (name: pkg:
    let meta = pkg.meta or { }; in
    if !(pkg ? version) then null else {
      description = meta.description or "";
      version = pkg.version;
      license = licenseName (meta.license or "unknown");
      homepage = meta.homepage or null;
      sourceType = pkg.passthru.sourceType or "source";
      hideFromDocs = pkg.passthru.hideFromDocs or false;
      hasMainProgram = meta ? mainProgram;
      category = pkg.passthru.category or "Uncategorized";
    }
  ) pkgs
"""

_GITHUB_REMOTE = re.compile(r"[:/]([A-Za-z0-9_.-]+)/([A-Za-z0-9_.-]+?)(?:\.git)?$")


class PackageMetadata(BaseModel):
    """Documentation-relevant metadata for one package."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    description: str
    version: str
    license: str
    homepage: str | None = None
    source_type: str = Field(alias="sourceType")
    hide_from_docs: bool = Field(default=False, alias="hideFromDocs")
    has_main_program: bool = Field(default=False, alias="hasMainProgram")
    category: str = "Uncategorized"


class MetadataSource(Protocol):
    def package_metadata(self) -> dict[str, PackageMetadata]: ...


class DocsRegenerator(Protocol):
    def regenerate(self) -> bool:
        """Rewrite the docs block; return True if the file changed."""
        ...


def parse_metadata(raw: Any) -> dict[str, PackageMetadata]:
    """Validate the evaluated metadata map, dropping null (versionless) entries."""
    if not isinstance(raw, dict):
        raise DocsError("package metadata: expected an object")
    result: dict[str, PackageMetadata] = {}
    for name, meta in raw.items():
        if meta is None:
            continue
        try:
            result[name] = PackageMetadata.model_validate(meta)
        except ValidationError as exc:
            raise DocsError(f"metadata[{name}]: {exc}") from exc
    return result


class NixMetadataSource:
    def __init__(self, system: str) -> None:
        self.system = system

    def package_metadata(self) -> dict[str, PackageMetadata]:
        try:
            raw = nix.eval_json_expr(METADATA_EXPR, {"DOCS_SYSTEM": self.system})
        except (CommandError, JSONDecodeError) as exc:
            raise DocsError(f"failed to evaluate package metadata:\n{exc}") from exc
        return parse_metadata(raw)


def flake_ref(settings: Settings) -> str:
    """Flake reference shown in generated ``nix run`` lines."""
    if settings.package_docs_flake:
        return settings.package_docs_flake
    if settings.github_repository:
        return f"github:{settings.github_repository}"

    url = git("remote", "get-url", "origin", check=False)
    if "github.com" not in url:
        return "."
    match = _GITHUB_REMOTE.search(url)
    if not match:
        return "."
    return f"github:{match.group(1)}/{match.group(2)}"


def render_package(
    name: str, meta: PackageMetadata, ref: str, packages_dir: Path = Path("packages")
) -> str:
    lines = [
        "<details>",
        f"<summary><strong>{name}</strong> - {meta.description}</summary>",
        "",
        f"- **Source**: {meta.source_type}",
        f"- **License**: {meta.license}",
    ]
    if meta.homepage:
        lines.append(f"- **Homepage**: {meta.homepage}")
    if meta.has_main_program:
        lines.append(f"- **Usage**: `nix run {ref}#{name} -- --help`")
    lines.append(
        f"- **Nix**: [packages/{name}/package.nix](packages/{name}/package.nix)"
    )
    readme = packages_dir / name / "README.md"
    if readme.is_file():
        lines.append(
            f"- **Documentation**: See [packages/{name}/README.md]"
            f"(packages/{name}/README.md) for detailed usage"
        )
    lines.extend(["", "</details>"])
    return "\n".join(lines)


def render_docs(metadata: dict[str, PackageMetadata], ref: str) -> str:
    """Render every visible package, grouped by category.

    Known categories come first in their fixed order, any others follow
    alphabetically; packages within a category are sorted by name.
    """
    by_category: dict[str, list[str]] = {}
    for name in sorted(metadata):
        meta = metadata[name]
        if meta.hide_from_docs:
            continue
        by_category.setdefault(meta.category, []).append(name)

    ordered = [c for c in CATEGORY_ORDER if c in by_category]
    ordered += sorted(c for c in by_category if c not in CATEGORY_ORDER)

    docs: list[str] = []
    for category in ordered:
        docs.append(f"### {category}\n")
        for name in by_category[category]:
            docs.append(render_package(name, metadata[name], ref))
        docs.append("")
    return "\n".join(docs).rstrip()


def replace_generated_block(content: str, generated: str) -> str:
    """Replace the text strictly between the markers with *generated*.

    Raises:
        DocsError: If a marker is missing or END comes before BEGIN.
    """
    begin = content.find(BEGIN_MARKER)
    end = content.find(END_MARKER)
    if begin == -1 or end == -1:
        raise DocsError("could not find generated docs markers")
    if end < begin:
        raise DocsError("END marker appears before BEGIN marker")
    head = content[: begin + len(BEGIN_MARKER)]
    return f"{head}\n\n{generated}\n{content[end:]}"


class ReadmeDocs:
    """DocsRegenerator for the repository README."""

    def __init__(self, settings: Settings, source: MetadataSource | None = None) -> None:
        self.settings = settings
        self.path = Path(settings.readme)
        self.source = source or NixMetadataSource(settings.system)

    def regenerate(self) -> bool:
        if not self.path.is_file():
            raise DocsError(f"{self.path} not found")
        content = self.path.read_text()
        # Fail on missing markers before paying for the nix eval
        replace_generated_block(content, "")

        generated = render_docs(self.source.package_metadata(), flake_ref(self.settings))
        new_content = replace_generated_block(content, generated)
        if new_content == content:
            return False
        self.path.write_text(new_content)
        return True
