"""The shared on-disk state every stage works against.

One Workspace is created per invocation and handed to each stage. The
checkout, the install namespace and the scratch root are single mutable
directory trees, so stages must run one at a time.
"""

import os
import sys
from pathlib import Path

from typst_review.config import AppConfig
from typst_review.models import PackageSpec


def default_data_dir() -> Path:
    """Platform data directory (the one Typst reads local packages from)."""
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        return Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    xdg = os.environ.get("XDG_DATA_HOME")
    return Path(xdg) if xdg else Path.home() / ".local" / "share"


class Workspace:
    """Paths for the packages checkout, installed packages and scratch projects."""

    def __init__(
        self,
        repo_dir: Path,
        install_root: Path,
        scratch_root: Path,
        namespace: str = "preview",
        remote: str = "origin",
        main_branch: str = "main",
    ) -> None:
        """
        Args:
            repo_dir: Local git checkout of the package monorepo.
            install_root: Local package root (contains <namespace>/<name>/<version>).
            scratch_root: Directory where template projects are scaffolded.
            namespace: Package namespace (e.g. "preview").
            remote: Remote to fetch PR heads from.
            main_branch: Branch checked out before fetching and when cleaning.
        """
        self.repo_dir = Path(repo_dir)
        self.install_root = Path(install_root)
        self.scratch_root = Path(scratch_root)
        self.namespace = namespace
        self.remote = remote
        self.main_branch = main_branch

    @classmethod
    def from_config(cls, config: AppConfig) -> "Workspace":
        """Build the workspace from repository/workspace/toolchain settings."""
        data_dir = Path(config.toolchain.data_dir) if config.toolchain.data_dir else default_data_dir()
        return cls(
            repo_dir=Path(config.repository.path),
            install_root=data_dir / "typst" / "packages",
            scratch_root=Path(config.workspace.scratch_dir),
            namespace=config.repository.namespace,
            remote=config.repository.remote,
            main_branch=config.repository.main_branch,
        )

    @property
    def namespace_dir(self) -> Path:
        """Installed packages of the namespace."""
        return self.install_root / self.namespace

    def package_dir(self, package: PackageSpec) -> Path:
        """Package sources in the checkout: <repo>/packages/<namespace>/<name>/<version>."""
        return self.repo_dir / "packages" / self.namespace / package.name / package.version

    def install_dir(self, package: PackageSpec) -> Path:
        """Where the package is installed for the toolchain to resolve it."""
        return self.namespace_dir / package.name / package.version

    def project_dir(self, package: PackageSpec) -> Path:
        """Scratch project for a template package: <scratch>/<name>."""
        return self.scratch_root / package.name

    def package_spec(self, package: PackageSpec) -> str:
        """Import spec in this workspace's namespace."""
        return package.spec(self.namespace)
