"""Local branch operations on the packages checkout: inspect, checkout, delete,
and fetch a pull request head into a review branch."""

import logging
from pathlib import Path

from typst_review.errors import GitRunnerError
from typst_review.services.git._run import _run_git


def current_branch(repo_dir: Path, log: logging.Logger | None = None, timeout: int | None = None) -> str | None:
    """Return the checked-out branch name, or None when HEAD is detached."""
    try:
        out = _run_git(["symbolic-ref", "--quiet", "--short", "HEAD"], cwd=repo_dir, log=log, timeout=timeout)
    except GitRunnerError:
        return None
    return out.strip() or None


def list_local_branches(repo_dir: Path, log: logging.Logger | None = None, timeout: int | None = None) -> list[str]:
    """Names of all local branches."""
    out = _run_git(
        ["for-each-ref", "--format=%(refname:short)", "refs/heads/"],
        cwd=repo_dir,
        log=log,
        timeout=timeout,
    )
    return [line.strip() for line in out.splitlines() if line.strip()]


def branch_exists(
    branch_name: str,
    repo_dir: Path,
    log: logging.Logger | None = None,
    timeout: int | None = None,
) -> bool:
    """True if a local branch with this exact name exists."""
    return branch_name in list_local_branches(repo_dir, log=log, timeout=timeout)


def checkout_branch(
    branch_name: str,
    repo_dir: Path,
    log: logging.Logger | None = None,
    timeout: int | None = None,
) -> None:
    """Checkout the given local branch."""
    _run_git(["checkout", branch_name], cwd=repo_dir, log=log, timeout=timeout)
    if log:
        log.info("Checked out branch %s", branch_name)


def ensure_on_branch(
    branch_name: str,
    repo_dir: Path,
    log: logging.Logger | None = None,
    timeout: int | None = None,
) -> None:
    """Checkout branch_name unless it is already checked out."""
    if current_branch(repo_dir, log=log, timeout=timeout) != branch_name:
        checkout_branch(branch_name, repo_dir, log=log, timeout=timeout)


def delete_branch(
    branch_name: str,
    repo_dir: Path,
    log: logging.Logger | None = None,
    timeout: int | None = None,
) -> None:
    """Force-delete a local branch."""
    _run_git(["branch", "-D", branch_name], cwd=repo_dir, log=log, timeout=timeout)
    if log:
        log.info("Removed branch %s", branch_name)


def fetch_pull_request(
    remote_ref: str,
    branch_name: str,
    repo_dir: Path,
    remote: str = "origin",
    main_branch: str = "main",
    log: logging.Logger | None = None,
    timeout: int | None = None,
) -> str:
    """Fetch a PR head (e.g. pull/42/head) into a fresh local branch and check it out.

    Switches to main_branch first, deletes an existing local branch of the
    same name, fetches remote_ref, creates branch_name at FETCH_HEAD and
    checks it out. Running it again for the same PR yields the same state.

    Args:
        remote_ref: Ref on the remote holding the PR head.
        branch_name: Local branch to create.
        repo_dir: Local packages checkout.
        remote: Remote name.
        main_branch: Branch to stand on while replacing the review branch.
        log: Optional logger.
        timeout: Optional timeout per git call, in seconds.

    Returns:
        The checked-out local branch name.

    Raises:
        GitRunnerError: If any git step fails.
    """
    ensure_on_branch(main_branch, repo_dir, log=log, timeout=timeout)

    if branch_exists(branch_name, repo_dir, log=log, timeout=timeout):
        if log:
            log.info("Removing existing branch %s", branch_name)
        delete_branch(branch_name, repo_dir, log=log, timeout=timeout)

    if log:
        log.info("Fetching %s from %s", remote_ref, remote)
    _run_git(["fetch", remote, remote_ref], cwd=repo_dir, log=log, timeout=timeout)
    _run_git(["branch", "-f", branch_name, "FETCH_HEAD"], cwd=repo_dir, log=log, timeout=timeout)
    checkout_branch(branch_name, repo_dir, log=log, timeout=timeout)
    return branch_name


def remove_other_branches(
    repo_dir: Path,
    main_branch: str = "main",
    log: logging.Logger | None = None,
    timeout: int | None = None,
) -> list[str]:
    """Checkout main_branch and delete every other local branch.

    Returns:
        Names of the deleted branches.
    """
    ensure_on_branch(main_branch, repo_dir, log=log, timeout=timeout)
    removed = []
    for name in list_local_branches(repo_dir, log=log, timeout=timeout):
        if name == main_branch:
            continue
        delete_branch(name, repo_dir, log=log, timeout=timeout)
        removed.append(name)
    return removed
