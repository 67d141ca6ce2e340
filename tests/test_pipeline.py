"""Tests for the review pipeline with fake collaborators (no subprocesses)."""

from pathlib import Path
from typing import Dict, List, Set
from unittest.mock import Mock

import pytest

from typst_review.adapters.base import PackageToolchain, VersionControl
from typst_review.adapters.typst import TypstToolchain
from typst_review.errors import GitRunnerError, ToolchainError
from typst_review.models import OutcomeReason, OutcomeStatus, PackageSpec, ReviewMode
from typst_review.parser import parse_pull_request
from typst_review.pipeline import (
    compile_entry,
    fetch_pull_request,
    init_template,
    install_package,
    resolve_entrypoint,
    run_review,
)
from typst_review.reporter import exit_code
from typst_review.workspace import Workspace


class FakeVersionControl(VersionControl):
    """Records fetches; optionally fails like a missing remote ref."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: List[tuple] = []

    def checkout_pull_request(self, workspace: Workspace, remote_ref: str, branch_name: str) -> str:
        self.calls.append((remote_ref, branch_name))
        if self.fail:
            raise GitRunnerError("git fetch origin pull/1/head: exit code 128", "fatal: couldn't find remote ref\n")
        return branch_name

    def remove_review_branches(self, workspace: Workspace) -> List[str]:
        return []


class FakeToolchain(PackageToolchain):
    """Behaves like typst on disk: installs by creating the target, refuses to
    init into an existing directory, and compiles when the document says so."""

    def __init__(
        self,
        templates: Dict[str, List[str]] | None = None,
        install_errors: Set[str] | None = None,
        init_errors: Set[str] | None = None,
        compile_errors: Set[str] | None = None,
        files: Dict[str, List[str]] | None = None,
    ) -> None:
        self.templates = templates or {}
        self.install_errors = install_errors or set()
        self.init_errors = init_errors or set()
        self.compile_errors = compile_errors or set()
        self.files = files or {}
        self.installed: List[Path] = []
        self.compiled: List[Path] = []
        self.opened: List[Path] = []

    def install(self, source_dir: Path, target_dir: Path) -> None:
        if source_dir.parent.name in self.install_errors:
            raise ToolchainError("install failed", "error: bad manifest\n")
        target_dir.mkdir(parents=True, exist_ok=True)
        self.installed.append(target_dir)

    def has_template(self, install_dir: Path) -> bool:
        return install_dir.parent.name in self.templates

    def template_entrypoints(self, install_dir: Path) -> List[str]:
        return list(self.templates.get(install_dir.parent.name, []))

    def scaffold_template(self, package_spec: str, project_dir: Path) -> str:
        name = project_dir.name
        if name in self.init_errors:
            raise ToolchainError("typst init failed", "error: template directory does not exist\n")
        if project_dir.exists():
            raise ToolchainError("typst init failed", "error: project directory already exists\n")
        project_dir.mkdir(parents=True)
        for file in self.files.get(name, ["main.typ"]):
            (project_dir / file).parent.mkdir(parents=True, exist_ok=True)
            (project_dir / file).write_text("= Hello\n")
        return f"Successfully created new project from {package_spec}\n"

    def compile(self, entrypoint: Path) -> str:
        self.compiled.append(entrypoint)
        if entrypoint.parent.name in self.compile_errors:
            raise ToolchainError("typst compile failed", "error: unknown variable: foo\n")
        return ""

    def open_output(self, document: Path) -> None:
        self.opened.append(document)


def _workspace(tmp_path: Path, packages: List[PackageSpec]) -> Workspace:
    """Workspace with the given packages present in the checkout."""
    ws = Workspace(
        repo_dir=tmp_path / "packages",
        install_root=tmp_path / "data" / "typst" / "packages",
        scratch_root=tmp_path / "test",
    )
    for package in packages:
        ws.package_dir(package).mkdir(parents=True, exist_ok=True)
    return ws


class TestRunReview:
    """run_review: stage ordering, failure isolation, modes, idempotence."""

    def test_fetch_failure_stops_run(self, tmp_path: Path) -> None:
        """A failed fetch yields no package results and no install attempt."""
        spec = parse_pull_request("a:1.0.0 #1")
        toolchain = FakeToolchain()
        report = run_review(spec, _workspace(tmp_path, list(spec.packages)), FakeVersionControl(fail=True), toolchain)
        assert report.fetch.status is OutcomeStatus.FAILED
        assert report.fetch.reason is OutcomeReason.FETCH_ERROR
        assert report.fetch.detail == "fatal: couldn't find remote ref\n"
        assert report.packages == ()
        assert toolchain.installed == []
        assert exit_code(report) == 1

    def test_install_failure_isolated_to_its_package(self, tmp_path: Path) -> None:
        """a's install fails; b runs every stage independently."""
        spec = parse_pull_request("a:1.0.0, b:2.0.0 #5")
        toolchain = FakeToolchain(templates={"b": []}, install_errors={"a"})
        report = run_review(spec, _workspace(tmp_path, list(spec.packages)), FakeVersionControl(), toolchain)

        a, b = report.packages
        assert a.install.reason is OutcomeReason.INSTALLER_ERROR
        assert a.template_init.reason is OutcomeReason.PREREQUISITE_FAILED
        assert a.compile.reason is OutcomeReason.PREREQUISITE_FAILED
        assert b.install.is_success
        assert b.template_init.is_success
        assert b.compile.is_success
        assert exit_code(report) == 1

    def test_package_missing_from_checkout(self, tmp_path: Path) -> None:
        spec = parse_pull_request("a:1.0.0, typo:2.0.0 #5")
        ws = _workspace(tmp_path, [spec.packages[0]])
        report = run_review(spec, ws, FakeVersionControl(), FakeToolchain())
        assert report.packages[0].install.is_success
        assert report.packages[1].install.reason is OutcomeReason.PACKAGE_NOT_IN_CHECKOUT
        assert report.packages[1].compile.reason is OutcomeReason.PREREQUISITE_FAILED

    def test_no_template_skips_compile(self, tmp_path: Path) -> None:
        spec = parse_pull_request("lib:1.0.0 #2")
        toolchain = FakeToolchain()
        report = run_review(spec, _workspace(tmp_path, list(spec.packages)), FakeVersionControl(), toolchain)
        result = report.packages[0]
        assert result.template_init.status is OutcomeStatus.SKIPPED
        assert result.template_init.reason is OutcomeReason.NO_TEMPLATE
        assert result.compile.status is OutcomeStatus.SKIPPED
        assert toolchain.compiled == []
        assert exit_code(report) == 0

    def test_template_failure_skips_compile(self, tmp_path: Path) -> None:
        spec = parse_pull_request("tpl:1.0.0 #2")
        toolchain = FakeToolchain(templates={"tpl": ["main.typ"]}, init_errors={"tpl"})
        report = run_review(spec, _workspace(tmp_path, list(spec.packages)), FakeVersionControl(), toolchain)
        result = report.packages[0]
        assert result.template_init.reason is OutcomeReason.TEMPLATE_ERROR
        assert result.template_init.detail == "error: template directory does not exist\n"
        assert result.compile.reason is OutcomeReason.PREREQUISITE_FAILED

    def test_compile_failure_does_not_stop_next_package(self, tmp_path: Path) -> None:
        spec = parse_pull_request("a:1.0.0 and b:1.0.0 #3")
        toolchain = FakeToolchain(templates={"a": [], "b": []}, compile_errors={"a"})
        report = run_review(spec, _workspace(tmp_path, list(spec.packages)), FakeVersionControl(), toolchain)
        assert report.packages[0].compile.detail == "error: unknown variable: foo\n"
        assert report.packages[1].compile.is_success
        assert len(toolchain.compiled) == 2

    def test_results_follow_input_order(self, tmp_path: Path) -> None:
        spec = parse_pull_request("z:1.0.0, a:1.0.0, m:1.0.0 #3")
        report = run_review(spec, _workspace(tmp_path, list(spec.packages)), FakeVersionControl(), FakeToolchain())
        assert [r.spec.name for r in report.packages] == ["z", "a", "m"]

    def test_duplicates_processed_independently(self, tmp_path: Path) -> None:
        spec = parse_pull_request("tpl:1.0.0, tpl:1.0.0 #3")
        toolchain = FakeToolchain(templates={"tpl": []})
        report = run_review(spec, _workspace(tmp_path, list(spec.packages)), FakeVersionControl(), toolchain)
        assert len(report.packages) == 2
        assert all(r.compile.is_success for r in report.packages)

    def test_rerun_is_idempotent(self, tmp_path: Path) -> None:
        """A second run over existing install and scratch project succeeds identically."""
        spec = parse_pull_request("tpl:1.0.0 and lib:2.0.0 #8")
        ws = _workspace(tmp_path, list(spec.packages))
        toolchain = FakeToolchain(templates={"tpl": ["main.typ"]})
        first = run_review(spec, ws, FakeVersionControl(), toolchain)
        second = run_review(spec, ws, FakeVersionControl(), toolchain)
        assert first == second
        assert exit_code(second) == 0

    def test_fetch_mode_runs_only_fetch(self, tmp_path: Path) -> None:
        spec = parse_pull_request("a:1.0.0 #1")
        vcs = FakeVersionControl()
        toolchain = FakeToolchain()
        report = run_review(spec, _workspace(tmp_path, []), vcs, toolchain, mode=ReviewMode.FETCH)
        assert vcs.calls == [("pull/1/head", "a_1.0.0_#1")]
        assert report.ref == "a_1.0.0_#1"
        assert report.packages == ()
        assert toolchain.installed == []

    def test_install_mode_skips_fetch(self, tmp_path: Path) -> None:
        spec = parse_pull_request("a:1.0.0 #1")
        vcs = FakeVersionControl()
        report = run_review(spec, _workspace(tmp_path, list(spec.packages)), vcs, FakeToolchain(), mode=ReviewMode.INSTALL)
        assert vcs.calls == []
        assert report.fetch.reason is OutcomeReason.NOT_REQUESTED
        assert report.packages[0].install.is_success

    def test_undecodable_manifest_isolated_to_its_package(self, tmp_path: Path) -> None:
        """A typst.toml that is not UTF-8 fails that install; the next package still installs."""
        spec = parse_pull_request("bad:1.0.0, good:1.0.0 #5")
        bad, good = spec.packages
        ws = _workspace(tmp_path, list(spec.packages))
        (ws.package_dir(bad) / "typst.toml").write_bytes(b'[package]\nname = "b\xffd"\n')
        (ws.package_dir(good) / "typst.toml").write_text(
            '[package]\nname = "good"\nversion = "1.0.0"\nentrypoint = "lib.typ"\n'
        )
        (ws.package_dir(good) / "lib.typ").write_text("")

        report = run_review(spec, ws, FakeVersionControl(), TypstToolchain(), mode=ReviewMode.INSTALL)

        first, second = report.packages
        assert first.install.reason is OutcomeReason.INSTALLER_ERROR
        assert "typst.toml" in first.install.detail
        assert first.template_init.reason is OutcomeReason.PREREQUISITE_FAILED
        assert second.install.is_success
        assert second.template_init.reason is OutcomeReason.NO_TEMPLATE
        assert (ws.install_dir(good) / "lib.typ").is_file()
        assert exit_code(report) == 1

    def test_unexpected_errors_propagate(self, tmp_path: Path) -> None:
        """Only command and OS errors become outcomes."""
        spec = parse_pull_request("a:1.0.0 #1")
        toolchain = Mock(spec=PackageToolchain)
        toolchain.install.side_effect = RuntimeError("bug")
        with pytest.raises(RuntimeError):
            run_review(spec, _workspace(tmp_path, list(spec.packages)), FakeVersionControl(), toolchain)


class TestStages:
    """Single stage functions."""

    def test_fetch_success_returns_ref(self, tmp_path: Path) -> None:
        spec = parse_pull_request("a:1.0.0 #4")
        result = fetch_pull_request(spec, _workspace(tmp_path, []), FakeVersionControl())
        assert result.outcome.is_success
        assert result.ref == "a_1.0.0_#4"

    def test_install_os_error_is_installer_error(self, tmp_path: Path) -> None:
        pkg = PackageSpec(name="a", version="1.0.0")
        toolchain = Mock(spec=PackageToolchain)
        toolchain.install.side_effect = PermissionError("denied")
        outcome = install_package(pkg, _workspace(tmp_path, [pkg]), toolchain)
        assert outcome.reason is OutcomeReason.INSTALLER_ERROR
        assert "denied" in outcome.detail

    def test_init_template_replaces_existing_project(self, tmp_path: Path) -> None:
        pkg = PackageSpec(name="tpl", version="1.0.0")
        ws = _workspace(tmp_path, [pkg])
        stale = ws.project_dir(pkg) / "stale.typ"
        stale.parent.mkdir(parents=True)
        stale.write_text("old")
        outcome = init_template(pkg, ws, FakeToolchain(templates={"tpl": []}))
        assert outcome.is_success
        assert not stale.exists()
        assert (ws.project_dir(pkg) / "main.typ").is_file()

    def test_init_template_metadata_error(self, tmp_path: Path) -> None:
        pkg = PackageSpec(name="tpl", version="1.0.0")
        toolchain = Mock(spec=PackageToolchain)
        toolchain.has_template.side_effect = ToolchainError("failed to read package manifest", "no such file")
        outcome = init_template(pkg, _workspace(tmp_path, [pkg]), toolchain)
        assert outcome.reason is OutcomeReason.TEMPLATE_ERROR
        assert outcome.detail == "no such file"

    def test_compile_falls_back_to_declared_entrypoint(self, tmp_path: Path) -> None:
        pkg = PackageSpec(name="tpl", version="1.0.0")
        ws = _workspace(tmp_path, [pkg])
        toolchain = FakeToolchain(templates={"tpl": ["thesis.typ"]}, files={"tpl": ["thesis.typ"]})
        init_template(pkg, ws, toolchain)
        outcome = compile_entry(pkg, ws.project_dir(pkg), ws, toolchain)
        assert outcome.is_success
        assert toolchain.compiled == [ws.project_dir(pkg) / "thesis.typ"]

    def test_compile_prefers_default_entrypoint(self, tmp_path: Path) -> None:
        pkg = PackageSpec(name="tpl", version="1.0.0")
        ws = _workspace(tmp_path, [pkg])
        toolchain = FakeToolchain(templates={"tpl": ["thesis.typ"]}, files={"tpl": ["main.typ", "thesis.typ"]})
        init_template(pkg, ws, toolchain)
        compile_entry(pkg, ws.project_dir(pkg), ws, toolchain)
        assert toolchain.compiled == [ws.project_dir(pkg) / "main.typ"]

    def test_compile_without_entrypoint_is_skipped(self, tmp_path: Path) -> None:
        pkg = PackageSpec(name="tpl", version="1.0.0")
        ws = _workspace(tmp_path, [pkg])
        toolchain = FakeToolchain(templates={"tpl": ["thesis.typ"]}, files={"tpl": ["README.md"]})
        init_template(pkg, ws, toolchain)
        outcome = compile_entry(pkg, ws.project_dir(pkg), ws, toolchain)
        assert outcome.reason is OutcomeReason.NO_ENTRY_POINT
        assert toolchain.compiled == []

    def test_compile_opens_output_when_enabled(self, tmp_path: Path) -> None:
        pkg = PackageSpec(name="tpl", version="1.0.0")
        ws = _workspace(tmp_path, [pkg])
        toolchain = FakeToolchain(templates={"tpl": []})
        init_template(pkg, ws, toolchain)
        compile_entry(pkg, ws.project_dir(pkg), ws, toolchain, open_output=True)
        assert toolchain.opened == [ws.project_dir(pkg) / "main.pdf"]

    def test_viewer_failure_keeps_success(self, tmp_path: Path) -> None:
        pkg = PackageSpec(name="tpl", version="1.0.0")
        ws = _workspace(tmp_path, [pkg])
        toolchain = FakeToolchain(templates={"tpl": []})
        init_template(pkg, ws, toolchain)
        toolchain.open_output = Mock(side_effect=ToolchainError("xdg-open not found"))
        outcome = compile_entry(pkg, ws.project_dir(pkg), ws, toolchain, open_output=True)
        assert outcome.is_success

    def test_resolve_entrypoint(self, tmp_path: Path) -> None:
        (tmp_path / "b.typ").write_text("")
        assert resolve_entrypoint(tmp_path, ["main.typ", "b.typ"]) == tmp_path / "b.typ"
        assert resolve_entrypoint(tmp_path, ["main.typ", ""]) is None
