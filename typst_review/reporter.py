"""Collect stage outcomes into a RunReport and render it as a transcript.

Transcript layout::

    PR #42
      name v1.0.0

    === Fetch ===
    pull/42/head -> name_1.0.0_#42: success

    === Install ===
    name:1.0.0: failed (installer error)
    <installer output, verbatim>

One block per stage of the run's mode, in pipeline order; lines inside a
block follow the PR title's package order.
"""

from typing import List

from typst_review.models import (
    OutcomeReason,
    OutcomeStatus,
    PackageRunResult,
    PullRequestSpec,
    ReviewMode,
    RunReport,
    Stage,
    StageOutcome,
)

ANSI_RED = "\x1b[31m"
ANSI_GREEN = "\x1b[32m"
ANSI_YELLOW = "\x1b[33m"
ANSI_BLUE = "\x1b[34m"
ANSI_CLEAR = "\x1b[0m"

_STATUS_COLORS = {
    OutcomeStatus.SUCCESS: ANSI_GREEN,
    OutcomeStatus.SKIPPED: ANSI_YELLOW,
    OutcomeStatus.FAILED: ANSI_RED,
}


class RunRecorder:
    """Sole writer of a RunReport: record outcomes as stages finish, then finish()."""

    def __init__(self, pr: PullRequestSpec, mode: ReviewMode = ReviewMode.REVIEW) -> None:
        self._pr = pr
        self._mode = mode
        self._fetch: StageOutcome | None = None
        self._ref: str | None = None
        self._packages: List[PackageRunResult] = []
        self._report: RunReport | None = None

    def _check_open(self) -> None:
        if self._report is not None:
            raise RuntimeError("run report is already finished")

    def record_fetch(self, outcome: StageOutcome, ref: str | None = None) -> None:
        self._check_open()
        self._fetch = outcome
        self._ref = ref

    def record_package(self, result: PackageRunResult) -> None:
        """Append the next package's result; must follow the PR's package order."""
        self._check_open()
        index = len(self._packages)
        if index >= len(self._pr.packages) or self._pr.packages[index] != result.spec:
            raise ValueError(f"result for {result.spec} recorded out of order (position {index})")
        self._packages.append(result)

    def finish(self) -> RunReport:
        """Freeze and return the report. A fetch never recorded counts as not requested."""
        if self._report is None:
            self._report = RunReport(
                pr=self._pr,
                mode=self._mode,
                fetch=self._fetch or StageOutcome.skipped(OutcomeReason.NOT_REQUESTED),
                ref=self._ref,
                packages=tuple(self._packages),
            )
        return self._report


def _paint(text: str, color: str, enabled: bool) -> str:
    return f"{color}{text}{ANSI_CLEAR}" if enabled else text


def _outcome_text(outcome: StageOutcome, color: bool) -> str:
    text = outcome.status.value
    if outcome.reason is not None:
        text = f"{text} ({outcome.reason.value})"
    text = _paint(text, _STATUS_COLORS[outcome.status], color)
    if outcome.detail and outcome.status is not OutcomeStatus.SKIPPED:
        text += "\n" + outcome.detail
        if not outcome.detail.endswith("\n"):
            text += "\n"
    else:
        text += "\n"
    return text


def render(report: RunReport, color: bool = False) -> str:
    """Render the transcript. Pure: the same report always gives the same text."""
    pr = report.pr
    out = [f"PR {_paint(f'#{pr.number}', ANSI_YELLOW, color)}\n"]
    for package in pr.packages:
        out.append(f"  {_paint(package.name, ANSI_BLUE, color)} v{package.version}\n")

    stages = report.mode.stages
    if report.fetch.is_failed:
        stages = (Stage.FETCH,)

    for stage in stages:
        out.append(f"\n=== {stage.value} ===\n")
        if stage is Stage.FETCH:
            target = report.ref or pr.branch_name
            out.append(f"{pr.remote_ref} -> {target}: {_outcome_text(report.fetch, color)}")
            continue
        for result in report.packages:
            out.append(f"{result.spec}: {_outcome_text(result.outcome(stage), color)}")
    return "".join(out)


def exit_code(report: RunReport) -> int:
    """0 if no stage failed anywhere in the report, 1 otherwise."""
    return 1 if report.failed else 0
