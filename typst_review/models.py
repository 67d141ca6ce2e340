"""Data models for pull request specs, stage outcomes, and run reports (Pydantic)."""

from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, PositiveInt


class PackageSpec(BaseModel):
    """One `name:version` entry from a PR title."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str

    @property
    def identifier(self) -> str:
        """Name and version joined by `_`, as used in local branch names."""
        return f"{self.name}_{self.version}"

    def spec(self, namespace: str = "preview") -> str:
        """Package import spec, e.g. `@preview/name:0.1.0`."""
        return f"@{namespace}/{self.name}:{self.version}"

    def __str__(self) -> str:
        return f"{self.name}:{self.version}"


class PullRequestSpec(BaseModel):
    """Parsed PR title: PR number plus packages in the order they were pasted."""

    model_config = ConfigDict(frozen=True)

    number: PositiveInt
    packages: Tuple[PackageSpec, ...] = Field(min_length=1)

    @property
    def remote_ref(self) -> str:
        """Remote ref holding the PR head."""
        return f"pull/{self.number}/head"

    @property
    def branch_name(self) -> str:
        """Local branch name: comma-joined `name_version` pairs plus `_#<number>`."""
        return ",".join(p.identifier for p in self.packages) + f"_#{self.number}"


class Stage(str, Enum):
    """Pipeline stages in execution order."""

    FETCH = "Fetch"
    INSTALL = "Install"
    TEMPLATE = "Template"
    COMPILE = "Compile"


class ReviewMode(str, Enum):
    """Which stages a run executes."""

    REVIEW = "review"
    FETCH = "fetch"
    INSTALL = "install"

    @property
    def stages(self) -> Tuple[Stage, ...]:
        if self is ReviewMode.FETCH:
            return (Stage.FETCH,)
        if self is ReviewMode.INSTALL:
            return (Stage.INSTALL, Stage.TEMPLATE, Stage.COMPILE)
        return (Stage.FETCH, Stage.INSTALL, Stage.TEMPLATE, Stage.COMPILE)


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


class OutcomeReason(str, Enum):
    """Why a stage was skipped or failed."""

    NO_TEMPLATE = "no template"
    NO_ENTRY_POINT = "no entry point"
    PREREQUISITE_FAILED = "prerequisite failed"
    NOT_REQUESTED = "not requested"
    FETCH_ERROR = "fetch error"
    PACKAGE_NOT_IN_CHECKOUT = "package not in checkout"
    INSTALLER_ERROR = "installer error"
    TEMPLATE_ERROR = "template error"
    COMPILE_ERROR = "compile error"


class StageOutcome(BaseModel):
    """Result of one stage for one unit of work (the PR or a package).

    Use the ``success``, ``skipped`` and ``failed`` constructors. ``detail``
    carries collaborator output verbatim.
    """

    model_config = ConfigDict(frozen=True)

    status: OutcomeStatus
    reason: OutcomeReason | None = None
    detail: str = ""

    @classmethod
    def success(cls, detail: str = "") -> "StageOutcome":
        return cls(status=OutcomeStatus.SUCCESS, detail=detail)

    @classmethod
    def skipped(cls, reason: OutcomeReason, detail: str = "") -> "StageOutcome":
        return cls(status=OutcomeStatus.SKIPPED, reason=reason, detail=detail)

    @classmethod
    def failed(cls, reason: OutcomeReason, detail: str = "") -> "StageOutcome":
        return cls(status=OutcomeStatus.FAILED, reason=reason, detail=detail)

    @property
    def is_success(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

    @property
    def is_failed(self) -> bool:
        return self.status is OutcomeStatus.FAILED


class PackageRunResult(BaseModel):
    """Outcomes of the package-level stages for one PackageSpec."""

    model_config = ConfigDict(frozen=True)

    spec: PackageSpec
    install: StageOutcome
    template_init: StageOutcome
    compile: StageOutcome

    def outcome(self, stage: Stage) -> StageOutcome:
        """Outcome for a package-level stage."""
        if stage is Stage.INSTALL:
            return self.install
        if stage is Stage.TEMPLATE:
            return self.template_init
        if stage is Stage.COMPILE:
            return self.compile
        raise ValueError(f"{stage.value} is not a package-level stage")


class RunReport(BaseModel):
    """Everything one invocation did, in PR-title order."""

    model_config = ConfigDict(frozen=True)

    pr: PullRequestSpec
    mode: ReviewMode = ReviewMode.REVIEW
    fetch: StageOutcome
    ref: str | None = None
    packages: Tuple[PackageRunResult, ...] = ()

    def outcomes(self) -> list[StageOutcome]:
        """Every recorded outcome: fetch first, then each package's stages."""
        result = [self.fetch]
        for package in self.packages:
            result.extend([package.install, package.template_init, package.compile])
        return result

    @property
    def failed(self) -> bool:
        return any(o.is_failed for o in self.outcomes())
