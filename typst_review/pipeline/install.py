"""Install stage: copy one package version from the checkout into the local namespace."""

import logging

from typst_review.adapters.base import PackageToolchain
from typst_review.errors import CommandError
from typst_review.models import OutcomeReason, PackageSpec, StageOutcome
from typst_review.workspace import Workspace


def install_package(
    package: PackageSpec,
    workspace: Workspace,
    toolchain: PackageToolchain,
    log: logging.Logger | None = None,
) -> StageOutcome:
    """Install <repo>/packages/<namespace>/<name>/<version>.

    A missing source directory (mistyped name or version) is reported as
    `package not in checkout`, anything the installer raises as
    `installer error`.
    """
    logger = log or logging.getLogger("typst_review.pipeline.install")
    source_dir = workspace.package_dir(package)
    if not source_dir.is_dir():
        logger.warning("Package %s not found at %s", package, source_dir)
        return StageOutcome.failed(OutcomeReason.PACKAGE_NOT_IN_CHECKOUT, f"{source_dir} does not exist")

    logger.info("Installing %s", source_dir)
    try:
        toolchain.install(source_dir, workspace.install_dir(package))
    except CommandError as e:
        logger.warning("Install of %s failed: %s", package, e)
        return StageOutcome.failed(OutcomeReason.INSTALLER_ERROR, e.diagnostic)
    except OSError as e:
        logger.warning("Install of %s failed: %s", package, e)
        return StageOutcome.failed(OutcomeReason.INSTALLER_ERROR, str(e))
    return StageOutcome.success()
