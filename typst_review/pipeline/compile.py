"""Compile stage: find a scaffolded project's entry document and compile it."""

import logging
from pathlib import Path
from typing import Iterable

from typst_review.adapters.base import PackageToolchain
from typst_review.errors import CommandError
from typst_review.models import OutcomeReason, PackageSpec, StageOutcome
from typst_review.workspace import Workspace

DEFAULT_ENTRYPOINT = "main.typ"


def resolve_entrypoint(project_dir: Path, candidates: Iterable[str]) -> Path | None:
    """First candidate (relative to project_dir) that exists as a file."""
    seen = set()
    for candidate in candidates:
        if not candidate or candidate in seen:
            continue
        seen.add(candidate)
        path = project_dir / candidate
        if path.is_file():
            return path
    return None


def compile_entry(
    package: PackageSpec,
    project_dir: Path,
    workspace: Workspace,
    toolchain: PackageToolchain,
    default_entrypoint: str = DEFAULT_ENTRYPOINT,
    open_output: bool = False,
    log: logging.Logger | None = None,
) -> StageOutcome:
    """Compile the project's entry document.

    The default document is tried first, then the entry points the template
    declares, in declared order. Compiler output is kept verbatim: as the
    failure detail on non-zero exit, as the success detail (warnings)
    otherwise.
    """
    logger = log or logging.getLogger("typst_review.pipeline.compile")
    try:
        declared = toolchain.template_entrypoints(workspace.install_dir(package))
    except CommandError as e:
        return StageOutcome.failed(OutcomeReason.COMPILE_ERROR, e.diagnostic)

    entrypoint = resolve_entrypoint(project_dir, [default_entrypoint, *declared])
    if entrypoint is None:
        logger.warning("No entry point found in %s", project_dir)
        return StageOutcome.skipped(OutcomeReason.NO_ENTRY_POINT)

    logger.info("Compiling %s", entrypoint)
    try:
        output = toolchain.compile(entrypoint)
    except CommandError as e:
        logger.warning("Compile of %s failed", entrypoint)
        return StageOutcome.failed(OutcomeReason.COMPILE_ERROR, e.diagnostic)

    if open_output:
        document = toolchain.output_path(entrypoint)
        try:
            toolchain.open_output(document)
        except CommandError as e:
            logger.warning("Could not open %s: %s", document, e)
    return StageOutcome.success(output)
