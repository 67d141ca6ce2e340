"""Remove everything earlier reviews left behind: installed preview packages,
scaffolded template projects and local review branches."""

import logging
import shutil
from pathlib import Path
from typing import List

from typst_review.adapters.base import VersionControl
from typst_review.workspace import Workspace


def clear_directory(directory: Path, log: logging.Logger | None = None) -> List[Path]:
    """Delete every entry inside directory, keeping the directory itself.

    A missing directory is not an error.

    Returns:
        The removed paths.
    """
    logger = log or logging.getLogger("typst_review.pipeline.clean")
    if not directory.is_dir():
        logger.info("Directory wasn't found at %s", directory)
        return []
    removed = []
    for entry in sorted(directory.iterdir()):
        logger.info("Removing %s", entry)
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()
        removed.append(entry)
    return removed


def clean_workspace(workspace: Workspace, vcs: VersionControl, log: logging.Logger | None = None) -> None:
    """Empty the installed namespace and the scratch root, then drop review branches.

    Raises:
        OSError: If a file cannot be removed.
        CommandError: If a git step fails.
    """
    logger = log or logging.getLogger("typst_review.pipeline.clean")
    clear_directory(workspace.namespace_dir, log=logger)
    clear_directory(workspace.scratch_root, log=logger)
    for branch in vcs.remove_review_branches(workspace):
        logger.info("Removed review branch %s", branch)
