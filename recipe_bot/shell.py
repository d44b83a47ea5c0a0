"""Shell, git and gh utilities.

Provides thin wrappers around subprocess calls for the external tools the
updater drives (git, gh, nix), plus console output helpers.
"""

from __future__ import annotations

import os
import subprocess
import sys
from collections.abc import Mapping
from typing import Any


class CommandError(RuntimeError):
    """A checked command exited non-zero, or could not be started at all.

    Attributes:
        command: Full argv of the failed command.
        returncode: Exit status.
        stdout: Captured stdout ("" when output was streamed).
        stderr: Captured stderr ("" when output was streamed).
    """

    def __init__(
        self,
        command: list[str],
        returncode: int,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.command = command
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        lines = [f"Command failed ({returncode}): {' '.join(command)}"]
        if stdout.strip():
            lines.append(f"--- stdout ---\n{stdout.rstrip()}")
        if stderr.strip():
            lines.append(f"--- stderr ---\n{stderr.rstrip()}")
        super().__init__("\n".join(lines))


def _merged_env(env: Mapping[str, str] | None) -> dict[str, str] | None:
    if env is None:
        return None
    return {**os.environ, **env}


# Exit status shells use for "command not found"
LAUNCH_FAILED = 127


def _launch(args: list[str], **kwargs: Any) -> subprocess.CompletedProcess[Any]:
    """subprocess.run, reporting a missing or non-executable program as CommandError."""
    try:
        return subprocess.run(args, **kwargs)
    except OSError as exc:
        raise CommandError(args, LAUNCH_FAILED, stderr=str(exc)) from exc


def capture(
    *args: str, check: bool = True, env: Mapping[str, str] | None = None
) -> subprocess.CompletedProcess[str]:
    """Run a command and capture its output as text.

    Args:
        *args: Command and arguments (e.g., "nix", "eval", "--json", ...).
        check: If True (default), raise CommandError on non-zero exit.
        env: Extra environment variables layered over the current ones.
    """
    result = _launch(
        list(args), capture_output=True, text=True, env=_merged_env(env)
    )
    if check and result.returncode != 0:
        raise CommandError(list(args), result.returncode, result.stdout, result.stderr)
    return result


def run(
    *args: str, check: bool = True, env: Mapping[str, str] | None = None
) -> subprocess.CompletedProcess[bytes]:
    """Run an arbitrary command.

    Unlike capture(), this doesn't capture output - it streams directly to
    the terminal so build logs stay visible in CI.

    Returns:
        CompletedProcess with returncode for checking success.
    """
    result = _launch(list(args), env=_merged_env(env))
    if check and result.returncode != 0:
        raise CommandError(list(args), result.returncode)
    return result


def git(*args: str, check: bool = True) -> str:
    """Run a git command and return stripped stdout.

    Args:
        *args: Arguments to pass to git (e.g., "status", "--porcelain").
        check: If True (default), raise on non-zero exit. Set to False
               for commands that may legitimately fail.
    """
    return capture("git", *args, check=check).stdout.strip()


def git_status(*args: str) -> int:
    """Run a git command for its exit status only (e.g. ``diff --quiet``)."""
    return capture("git", *args, check=False).returncode


def gh(
    *args: str, check: bool = True, env: Mapping[str, str] | None = None
) -> str:
    """Run a GitHub CLI command and return stripped stdout."""
    return capture("gh", *args, check=check, env=env).stdout.strip()


def trim_lines(text: str) -> list[str]:
    """Split command output into non-empty, stripped lines."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate the phases of discovery and of an update run.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def warn(msg: str) -> None:
    """Print an indented warning line."""
    print(f"  Warning: {msg}")


def error(msg: str) -> None:
    """Print an error message to stderr without exiting."""
    print(f"ERROR: {msg}", file=sys.stderr)
