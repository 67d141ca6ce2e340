"""Git operations on the local packages checkout."""

from typst_review.errors import GitRunnerError
from typst_review.services.git.branches import (
    branch_exists,
    checkout_branch,
    current_branch,
    delete_branch,
    ensure_on_branch,
    fetch_pull_request,
    list_local_branches,
    remove_other_branches,
)

__all__ = [
    "GitRunnerError",
    "branch_exists",
    "checkout_branch",
    "current_branch",
    "delete_branch",
    "ensure_on_branch",
    "fetch_pull_request",
    "list_local_branches",
    "remove_other_branches",
]
