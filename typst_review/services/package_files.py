"""Copy a package's files into the local install namespace.

Hidden files and directories are never copied. Exclude globs come from the
manifest's `exclude` list and follow gitignore rules:

- a glob with a leading or inner slash is anchored at the package root,
  otherwise it matches a file or directory name at any depth;
- a trailing slash restricts the glob to directories;
- everything below an excluded directory is excluded.

`*` and `?` stay within one path segment of an anchored glob unless the
glob uses `**`.
"""

import logging
import os
import shutil
from fnmatch import fnmatchcase
from pathlib import Path, PurePosixPath
from typing import Iterator, List

from pydantic import BaseModel, ConfigDict

from typst_review.errors import ToolchainError


class ExcludeGlob(BaseModel):
    """One normalized exclude glob."""

    model_config = ConfigDict(frozen=True)

    pattern: str
    anchored: bool = False
    dir_only: bool = False

    def matches(self, relative: PurePosixPath, is_dir: bool = False) -> bool:
        """True if this exact path (not its ancestors) matches."""
        if self.dir_only and not is_dir:
            return False
        if not self.anchored:
            return fnmatchcase(relative.name, self.pattern)
        if "**" not in self.pattern and len(relative.parts) != self.pattern.count("/") + 1:
            return False
        return fnmatchcase(relative.as_posix(), self.pattern)


def normalize_excludes(excludes: List[str]) -> List[ExcludeGlob]:
    """Parse manifest exclude globs; a leading `./` is dropped.

    Raises:
        ToolchainError: If a glob starts with `!`.
    """
    globs = []
    for exclude in excludes:
        if exclude.startswith("!"):
            raise ToolchainError(f"exclude globs cannot start with `!` - `{exclude}`")
        pattern = exclude
        while pattern.startswith("./"):
            pattern = pattern[2:]
        dir_only = pattern.endswith("/")
        pattern = pattern.rstrip("/")
        anchored = "/" in pattern
        pattern = pattern.lstrip("/")
        if pattern:
            globs.append(ExcludeGlob(pattern=pattern, anchored=anchored, dir_only=dir_only))
    return globs


def is_excluded(relative: PurePosixPath, globs: List[ExcludeGlob], is_dir: bool = False) -> bool:
    """True if the package-relative path or one of its parent directories matches a glob."""
    parts = relative.parts
    for depth in range(1, len(parts) + 1):
        prefix = PurePosixPath(*parts[:depth])
        prefix_is_dir = is_dir or depth < len(parts)
        if any(glob.matches(prefix, prefix_is_dir) for glob in globs):
            return True
    return False


def iter_package_files(source_dir: Path, globs: List[ExcludeGlob]) -> Iterator[PurePosixPath]:
    """Yield package-relative paths of every file to install, in sorted order."""
    source_dir = Path(source_dir)
    for root, dirs, files in os.walk(source_dir):
        rel_root = PurePosixPath(Path(root).relative_to(source_dir).as_posix())
        dirs[:] = sorted(
            d for d in dirs if not d.startswith(".") and not is_excluded(rel_root / d, globs, is_dir=True)
        )
        for name in sorted(files):
            if name.startswith("."):
                continue
            rel = rel_root / name
            if not is_excluded(rel, globs):
                yield rel


def copy_package(
    source_dir: Path,
    target_dir: Path,
    excludes: List[str],
    log: logging.Logger | None = None,
) -> int:
    """Replace target_dir with the installable files of source_dir.

    Returns:
        Number of files copied.

    Raises:
        ToolchainError: On an invalid exclude glob.
        OSError: If removing or copying fails.
    """
    globs = normalize_excludes(excludes)
    target_dir = Path(target_dir)
    if target_dir.exists():
        if log:
            log.info("Removing existing package %s", target_dir)
        shutil.rmtree(target_dir)

    count = 0
    for rel in iter_package_files(source_dir, globs):
        target_path = target_dir.joinpath(*rel.parts)
        target_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(Path(source_dir).joinpath(*rel.parts), target_path)
        count += 1
    target_dir.mkdir(parents=True, exist_ok=True)
    return count
