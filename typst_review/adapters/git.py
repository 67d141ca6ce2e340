"""git CLI implementation of VersionControl."""

import logging
from typing import List

from typst_review.adapters.base import VersionControl
from typst_review.services.git import fetch_pull_request, remove_other_branches
from typst_review.workspace import Workspace


class GitVersionControl(VersionControl):
    """Runs git in the workspace's packages checkout."""

    def __init__(self, timeout: int | None = None, log: logging.Logger | None = None) -> None:
        self.timeout = timeout
        self._log = log or logging.getLogger("typst_review.git")

    def checkout_pull_request(self, workspace: Workspace, remote_ref: str, branch_name: str) -> str:
        return fetch_pull_request(
            remote_ref,
            branch_name,
            repo_dir=workspace.repo_dir,
            remote=workspace.remote,
            main_branch=workspace.main_branch,
            log=self._log,
            timeout=self.timeout,
        )

    def remove_review_branches(self, workspace: Workspace) -> List[str]:
        return remove_other_branches(
            workspace.repo_dir,
            main_branch=workspace.main_branch,
            log=self._log,
            timeout=self.timeout,
        )
