"""Run external commands; raise CommandError (or a subclass) on failure."""

import logging
import subprocess
from pathlib import Path
from typing import Sequence, Type

from typst_review.errors import CommandError


def _text(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def run_command(
    cmd: Sequence[str],
    cwd: Path | None = None,
    timeout: int | None = None,
    log: logging.Logger | None = None,
    error_cls: Type[CommandError] = CommandError,
) -> subprocess.CompletedProcess:
    """Run cmd and return the completed process (stdout/stderr captured as text).

    Raises error_cls on non-zero exit, timeout, or missing executable. The
    exception's ``output`` is the command's stdout followed by its stderr,
    unmodified.
    """
    cmd = [str(part) for part in cmd]
    if log:
        log.debug("Running %s (cwd=%s)", " ".join(cmd), cwd or ".")
    try:
        return subprocess.run(cmd, cwd=cwd, check=True, capture_output=True, text=True, timeout=timeout)
    except subprocess.CalledProcessError as e:
        output = _text(e.stdout) + _text(e.stderr)
        if log:
            log.warning("%s failed with exit code %s", " ".join(cmd), e.returncode)
        raise error_cls(f"{' '.join(cmd)}: exit code {e.returncode}", output) from e
    except subprocess.TimeoutExpired as e:
        output = _text(e.stdout) + _text(e.stderr)
        raise error_cls(f"{' '.join(cmd)}: timed out after {timeout}s", output) from e
    except FileNotFoundError as e:
        raise error_cls(f"{cmd[0]} not found") from e
