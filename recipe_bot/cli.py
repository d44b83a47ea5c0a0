"""CLI entry point for recipe-bot."""

from __future__ import annotations

from pathlib import Path

import click
import pydantic

from recipe_bot.config import Settings
from recipe_bot.discovery import discover, write_outputs
from recipe_bot.docs import ReadmeDocs
from recipe_bot.errors import UpdateError
from recipe_bot.models import ItemKind, MatrixItem
from recipe_bot.orchestrator import RunOutcome, run_update
from recipe_bot.versions import compare_versions

KIND_CHOICES = [kind.value for kind in ItemKind] + ["flake-input"]


@click.group()
@click.version_option(package_name="recipe-bot")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="TOML config file. (default: .github/recipe-bot.toml)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None) -> None:
    """Keep packaged recipes and pinned references up to date."""
    ctx.obj = {"config_path": config_path}


def _settings(ctx: click.Context, **overrides: object) -> Settings:
    try:
        return Settings.load(ctx.obj["config_path"], **overrides)
    except (UpdateError, pydantic.ValidationError) as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command("discover")
@click.option("--packages", default=None, help="Whitespace-separated package filter.")
@click.option("--inputs", default=None, help="Whitespace-separated reference filter.")
@click.option("--system", default=None, help="Target platform, e.g. x86_64-linux.")
@click.pass_context
def discover_cmd(
    ctx: click.Context, packages: str | None, inputs: str | None, system: str | None
) -> None:
    """Build the update matrix and emit it as GitHub step outputs."""
    settings = _settings(ctx, packages=packages, inputs=inputs, system=system)
    matrix = discover(settings)
    write_outputs(matrix, settings.github_output)


@cli.command("update")
@click.argument("kind", type=click.Choice(KIND_CHOICES))
@click.argument("name")
@click.argument("current_version")
@click.pass_context
def update_cmd(ctx: click.Context, kind: str, name: str, current_version: str) -> None:
    """Update one item and publish it as a pull request."""
    settings = _settings(ctx)
    item = MatrixItem(
        type=ItemKind.parse(kind), name=name, current_version=current_version
    )
    try:
        result = run_update(item, settings)
    except UpdateError as exc:
        raise click.ClickException(str(exc)) from exc

    if result.outcome is RunOutcome.PUBLISHED and result.proposal is not None:
        click.echo(f"✓ {result.proposal.title} ({result.proposal.branch})")


@cli.command("docs")
@click.option("--readme", default=None, help="Document with the generated block.")
@click.pass_context
def docs_cmd(ctx: click.Context, readme: str | None) -> None:
    """Regenerate the package docs block in the README."""
    settings = _settings(ctx, readme=readme)
    try:
        changed = ReadmeDocs(settings).regenerate()
    except UpdateError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Updated {settings.readme}" if changed else f"No changes to {settings.readme}")


@cli.command("compare")
@click.argument("a")
@click.argument("b")
def compare_cmd(a: str, b: str) -> None:
    """Print -1, 0 or 1 comparing version A to version B."""
    click.echo(str(compare_versions(a, b)))


def main() -> None:
    cli()
