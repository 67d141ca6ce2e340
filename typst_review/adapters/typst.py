"""Typst implementation of PackageToolchain.

Installing copies the package into a local package directory (where `typst`
resolves `@preview/...` imports without a download); template scaffolding
and compiling shell out to `typst init` and `typst compile`. When the
install root is not Typst's own data directory, pass it as package_path so
both commands look there.
"""

import logging
from pathlib import Path
from typing import List

from typst_review.adapters.base import PackageToolchain
from typst_review.errors import ToolchainError
from typst_review.services.commands import run_command
from typst_review.services.manifest import load_manifest
from typst_review.services.package_files import copy_package


def _output(result) -> str:
    return (result.stdout or "") + (result.stderr or "")


class TypstToolchain(PackageToolchain):
    """Runs the typst CLI with an optional per-call timeout."""

    def __init__(
        self,
        command: str = "typst",
        timeout: int | None = None,
        viewer: str = "xdg-open",
        package_path: Path | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.command = command
        self.timeout = timeout
        self.viewer = viewer
        self.package_path = package_path
        self._log = log or logging.getLogger("typst_review.typst")

    def _typst(self, subcommand: str, *args: object) -> List[str]:
        cmd = [self.command, subcommand]
        if self.package_path is not None:
            cmd += ["--package-path", str(self.package_path)]
        return cmd + [str(arg) for arg in args]

    def install(self, source_dir: Path, target_dir: Path) -> None:
        manifest = load_manifest(source_dir)
        count = copy_package(source_dir, target_dir, manifest.package.exclude, log=self._log)
        self._log.info("Installed %s files into %s", count, target_dir)

    def has_template(self, install_dir: Path) -> bool:
        return load_manifest(install_dir).template is not None

    def template_entrypoints(self, install_dir: Path) -> List[str]:
        template = load_manifest(install_dir).template
        return [template.entrypoint] if template else []

    def scaffold_template(self, package_spec: str, project_dir: Path) -> str:
        result = run_command(
            self._typst("init", package_spec, project_dir),
            timeout=self.timeout,
            log=self._log,
            error_cls=ToolchainError,
        )
        return _output(result)

    def compile(self, entrypoint: Path) -> str:
        result = run_command(
            self._typst("compile", entrypoint),
            timeout=self.timeout,
            log=self._log,
            error_cls=ToolchainError,
        )
        return _output(result)

    def open_output(self, document: Path) -> None:
        run_command([self.viewer, str(document)], timeout=self.timeout, log=self._log, error_cls=ToolchainError)
