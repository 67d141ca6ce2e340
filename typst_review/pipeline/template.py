"""Template stage: scaffold a throwaway project from a template package."""

import logging
import shutil

from typst_review.adapters.base import PackageToolchain
from typst_review.errors import CommandError
from typst_review.models import OutcomeReason, PackageSpec, StageOutcome
from typst_review.workspace import Workspace


def init_template(
    package: PackageSpec,
    workspace: Workspace,
    toolchain: PackageToolchain,
    log: logging.Logger | None = None,
) -> StageOutcome:
    """Scaffold <scratch>/<name> from the installed package's template.

    Packages without a template are skipped, not failed. An existing
    project directory from an earlier run is replaced.
    """
    logger = log or logging.getLogger("typst_review.pipeline.template")
    try:
        has_template = toolchain.has_template(workspace.install_dir(package))
    except CommandError as e:
        logger.warning("Could not read template metadata of %s: %s", package, e)
        return StageOutcome.failed(OutcomeReason.TEMPLATE_ERROR, e.diagnostic)
    if not has_template:
        logger.info("%s is not a template", package)
        return StageOutcome.skipped(OutcomeReason.NO_TEMPLATE)

    project_dir = workspace.project_dir(package)
    package_spec = workspace.package_spec(package)
    logger.info("Initializing template %s in %s", package_spec, project_dir)
    try:
        if project_dir.is_dir():
            logger.info("Removing existing template %s", project_dir)
            shutil.rmtree(project_dir)
        elif project_dir.exists():
            project_dir.unlink()
        project_dir.parent.mkdir(parents=True, exist_ok=True)
        output = toolchain.scaffold_template(package_spec, project_dir)
    except CommandError as e:
        logger.warning("Template init of %s failed: %s", package, e)
        return StageOutcome.failed(OutcomeReason.TEMPLATE_ERROR, e.diagnostic)
    except OSError as e:
        logger.warning("Template init of %s failed: %s", package, e)
        return StageOutcome.failed(OutcomeReason.TEMPLATE_ERROR, str(e))
    return StageOutcome.success(output)
