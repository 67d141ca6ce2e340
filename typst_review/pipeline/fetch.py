"""Fetch stage: check out the PR head as a local review branch."""

import logging

from typst_review.adapters.base import VersionControl
from typst_review.errors import CommandError
from typst_review.models import OutcomeReason, PullRequestSpec, StageOutcome
from typst_review.workspace import Workspace


class FetchResult:
    """Fetch outcome plus the checked-out branch on success."""

    def __init__(self, outcome: StageOutcome, ref: str | None = None) -> None:
        self.outcome = outcome
        self.ref = ref


def fetch_pull_request(
    spec: PullRequestSpec,
    workspace: Workspace,
    vcs: VersionControl,
    log: logging.Logger | None = None,
) -> FetchResult:
    """Fetch pull/<n>/head into the branch named after the PR's packages.

    A failure here is fatal for the run; the caller stops before any
    package stage.
    """
    logger = log or logging.getLogger("typst_review.pipeline.fetch")
    logger.info("Fetching %s into %s", spec.remote_ref, spec.branch_name)
    try:
        ref = vcs.checkout_pull_request(workspace, spec.remote_ref, spec.branch_name)
    except CommandError as e:
        logger.error("Fetch of PR #%s failed: %s", spec.number, e)
        return FetchResult(StageOutcome.failed(OutcomeReason.FETCH_ERROR, e.diagnostic))
    return FetchResult(StageOutcome.success(), ref)
