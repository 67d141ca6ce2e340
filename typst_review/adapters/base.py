"""Abstract collaborators the review pipeline drives: version control and the
package toolchain.

Implementations raise CommandError subclasses; the pipeline stages turn those
into stage outcomes.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from typst_review.workspace import Workspace


class VersionControl(ABC):
    """Fetches PR heads into the shared packages checkout."""

    @abstractmethod
    def checkout_pull_request(self, workspace: Workspace, remote_ref: str, branch_name: str) -> str:
        """Fetch remote_ref into local branch_name, check it out, return the branch."""
        ...

    @abstractmethod
    def remove_review_branches(self, workspace: Workspace) -> List[str]:
        """Return to the main branch and delete all other local branches."""
        ...


class PackageToolchain(ABC):
    """Installs packages, scaffolds templates and compiles documents."""

    @abstractmethod
    def install(self, source_dir: Path, target_dir: Path) -> None:
        """Install the package at source_dir into target_dir, replacing it."""
        ...

    @abstractmethod
    def has_template(self, install_dir: Path) -> bool:
        """Whether the installed package declares a template."""
        ...

    @abstractmethod
    def template_entrypoints(self, install_dir: Path) -> List[str]:
        """Entry documents the template declares, relative to the project root, in declared order."""
        ...

    @abstractmethod
    def scaffold_template(self, package_spec: str, project_dir: Path) -> str:
        """Create a project from the template in project_dir; return the tool's output."""
        ...

    @abstractmethod
    def compile(self, entrypoint: Path) -> str:
        """Compile a document; return the tool's output (may contain warnings)."""
        ...

    def output_path(self, entrypoint: Path) -> Path:
        """Document produced by compile()."""
        return entrypoint.with_suffix(".pdf")

    @abstractmethod
    def open_output(self, document: Path) -> None:
        """Show a compiled document to the reviewer."""
        ...
