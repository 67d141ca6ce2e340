"""Internal helpers: run git commands, GitRunnerError."""

import logging
from pathlib import Path

from typst_review.errors import GitRunnerError
from typst_review.services.commands import run_command


def _run_git(
    args: list[str],
    cwd: Path,
    log: logging.Logger | None = None,
    timeout: int | None = None,
) -> str:
    """Run git command and return its stdout; raise GitRunnerError on non-zero exit."""
    result = run_command(["git"] + args, cwd=cwd, timeout=timeout, log=log, error_cls=GitRunnerError)
    return result.stdout
