"""Drive one review: fetch once, then install -> template -> compile per package.

Strictly sequential: the packages checkout, the install namespace and the
scratch root are shared directories. A failure in one package only skips
that package's remaining stages; a failed fetch ends the run.
"""

import logging

from typst_review.adapters.base import PackageToolchain, VersionControl
from typst_review.models import (
    OutcomeReason,
    PackageRunResult,
    PackageSpec,
    PullRequestSpec,
    ReviewMode,
    RunReport,
    Stage,
    StageOutcome,
)
from typst_review.pipeline.compile import DEFAULT_ENTRYPOINT, compile_entry
from typst_review.pipeline.fetch import fetch_pull_request
from typst_review.pipeline.install import install_package
from typst_review.pipeline.template import init_template
from typst_review.reporter import RunRecorder
from typst_review.workspace import Workspace


def review_package(
    package: PackageSpec,
    workspace: Workspace,
    toolchain: PackageToolchain,
    default_entrypoint: str = DEFAULT_ENTRYPOINT,
    open_output: bool = False,
    log: logging.Logger | None = None,
) -> PackageRunResult:
    """Run install, template and compile for one package, stopping at the first non-success."""
    install = install_package(package, workspace, toolchain, log=log)
    if not install.is_success:
        prerequisite = StageOutcome.skipped(OutcomeReason.PREREQUISITE_FAILED)
        return PackageRunResult(spec=package, install=install, template_init=prerequisite, compile=prerequisite)

    template_init = init_template(package, workspace, toolchain, log=log)
    if template_init.is_failed:
        compiled = StageOutcome.skipped(OutcomeReason.PREREQUISITE_FAILED)
    elif not template_init.is_success:
        compiled = StageOutcome.skipped(OutcomeReason.NO_TEMPLATE)
    else:
        compiled = compile_entry(
            package,
            workspace.project_dir(package),
            workspace,
            toolchain,
            default_entrypoint=default_entrypoint,
            open_output=open_output,
            log=log,
        )
    return PackageRunResult(spec=package, install=install, template_init=template_init, compile=compiled)


def run_review(
    spec: PullRequestSpec,
    workspace: Workspace,
    vcs: VersionControl,
    toolchain: PackageToolchain,
    mode: ReviewMode = ReviewMode.REVIEW,
    default_entrypoint: str = DEFAULT_ENTRYPOINT,
    open_output: bool = False,
    log: logging.Logger | None = None,
) -> RunReport:
    """Run the stages of mode for the PR and return the finished report.

    Args:
        spec: Parsed PR title.
        workspace: Shared on-disk state.
        vcs: Version control collaborator (used unless mode is install).
        toolchain: Package toolchain collaborator.
        mode: review (all stages), fetch (fetch only) or install (no fetch).
        default_entrypoint: Entry document looked up first when compiling.
        open_output: Open each successfully compiled document.
        log: Optional logger.
    """
    logger = log or logging.getLogger("typst_review.pipeline")
    recorder = RunRecorder(spec, mode)
    stages = mode.stages

    if Stage.FETCH in stages:
        fetched = fetch_pull_request(spec, workspace, vcs, log=logger)
        recorder.record_fetch(fetched.outcome, fetched.ref)
        if fetched.outcome.is_failed:
            return recorder.finish()

    if Stage.INSTALL not in stages:
        return recorder.finish()

    workspace.scratch_root.mkdir(parents=True, exist_ok=True)
    for package in spec.packages:
        logger.info("Reviewing %s", package)
        result = review_package(
            package,
            workspace,
            toolchain,
            default_entrypoint=default_entrypoint,
            open_output=open_output,
            log=logger,
        )
        recorder.record_package(result)
    return recorder.finish()
