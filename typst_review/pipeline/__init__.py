"""Review pipeline: fetch, install, template, compile, and clean."""

from typst_review.pipeline.clean import clean_workspace
from typst_review.pipeline.compile import compile_entry, resolve_entrypoint
from typst_review.pipeline.fetch import FetchResult, fetch_pull_request
from typst_review.pipeline.install import install_package
from typst_review.pipeline.run import review_package, run_review
from typst_review.pipeline.template import init_template

__all__ = [
    "FetchResult",
    "clean_workspace",
    "compile_entry",
    "fetch_pull_request",
    "init_template",
    "install_package",
    "resolve_entrypoint",
    "review_package",
    "run_review",
]
