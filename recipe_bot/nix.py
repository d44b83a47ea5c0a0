"""Nix CLI wrappers.

Every nix invocation goes through here so they all share the same
``NIX_PATH`` and flags.
"""

from __future__ import annotations

import json
from typing import Any

from .shell import capture, run

NIX_ENV = {"NIX_PATH": "nixpkgs=flake:nixpkgs"}

# Evaluates {name: version | null} for the platform's packages, either all
# of them or only the names in config.filter.
DISCOVERY_EXPR = """
let
  config = builtins.fromJSON (builtins.getEnv "DISCOVERY_CONFIG");
  flake = builtins.getFlake (toString ./.);
  pkgs = flake.packages.${config.system};
  getVersion = name:
    if pkgs ? ${name} && pkgs.${name} ? version
    then { inherit name; value = pkgs.${name}.version; }
    else null;
in
  if config.filter == null then
    builtins.mapAttrs (name: pkg:
      if pkg ? version then pkg.version else null
    ) pkgs
  else
    builtins.listToAttrs
      (builtins.filter (x: x != null) (map getVersion config.filter))
"""


def eval_package_versions(system: str, names: list[str] | None) -> dict[str, Any]:
    """Evaluate package versions for *system*.

    Raises:
        CommandError: If nix eval fails.
        json.JSONDecodeError: If nix prints something that isn't JSON.
    """
    config = json.dumps({"system": system, "filter": names})
    result = capture(
        "nix",
        "eval",
        "--json",
        "--impure",
        "--expr",
        DISCOVERY_EXPR,
        env={**NIX_ENV, "DISCOVERY_CONFIG": config},
    )
    data = json.loads(result.stdout)
    if not isinstance(data, dict):
        raise ValueError("nix eval: expected an object of package versions")
    return data


def eval_package_version(name: str, system: str) -> str | None:
    """Return ``packages.<system>.<name>.version`` or None if it can't be evaluated."""
    attr = f'.#packages.{system}."{name}".version'
    result = capture("nix", "eval", "--raw", "--impure", attr, check=False, env=NIX_ENV)
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def eval_json_expr(expr: str, extra_env: dict[str, str] | None = None) -> Any:
    """Evaluate a Nix expression (impure, so it may read env vars) to JSON."""
    result = capture(
        "nix",
        "--accept-flake-config",
        "eval",
        "--json",
        "--impure",
        "--expr",
        expr,
        env={**NIX_ENV, **(extra_env or {})},
    )
    return json.loads(result.stdout)


def build_check(system: str, check: str) -> None:
    """Build ``.#checks.<system>.<check>`` without a result link."""
    run(
        "nix",
        "build",
        "--accept-flake-config",
        "--no-link",
        f".#checks.{system}.{check}",
        env=NIX_ENV,
    )


def flake_check() -> None:
    """Evaluate all flake outputs without building them."""
    run("nix", "flake", "check", "--no-build", "--accept-flake-config", env=NIX_ENV)


def flake_update(name: str) -> None:
    run("nix", "flake", "update", name, env=NIX_ENV)


def nix_update(name: str, extra_args: list[str]) -> None:
    run("nix-update", "--flake", name, *extra_args, env=NIX_ENV)


def fmt() -> None:
    run("nix", "fmt", env=NIX_ENV)
