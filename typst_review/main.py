"""typst-review entry point.

Paste a package PR title to review it:

    typst-review "my-package:0.1.0 and my-template:0.2.0 #1234"

Subcommands: review (default: fetch, install, test templates), fetch (only
check out the PR), install (install and test without fetching), clean
(remove installed packages, template projects and review branches).
"""

import argparse
import logging
import sys
from pathlib import Path

from typst_review.adapters.git import GitVersionControl
from typst_review.adapters.typst import TypstToolchain
from typst_review.config import AppConfig, load_config
from typst_review.errors import ParseError, ReviewError
from typst_review.logging import ReviewLogging
from typst_review.models import ReviewMode
from typst_review.parser import parse_pull_request
from typst_review.pipeline import clean_workspace, run_review
from typst_review.reporter import exit_code, render
from typst_review.workspace import Workspace

SUBCOMMANDS = ("review", "fetch", "install", "clean")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI with optional subcommand (review | fetch | install | clean)."""
    argv = argv if argv is not None else sys.argv[1:]
    sub = "review"
    rest = list(argv)
    if argv and argv[0] in SUBCOMMANDS:
        sub = argv[0]
        rest = argv[1:]

    parser = argparse.ArgumentParser(
        prog="typst-review",
        description="Review Typst package PRs: fetch, install, initialize and compile templates",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("review.yaml"),
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    parser.add_argument(
        "title",
        nargs="*",
        help="PR title, e.g. 'name:0.1.0, other:1.0.0 and last:2.0.0 #1234'",
    )
    parsed = parser.parse_args(rest)
    parsed.subcommand = sub
    return parsed


def _load(config_path: Path) -> AppConfig:
    if not config_path.is_file() and config_path == Path("review.yaml"):
        if Path("config.example.yaml").is_file():
            config_path = Path("config.example.yaml")
            logging.basicConfig(level=logging.INFO)
            logging.getLogger("typst_review").warning("review.yaml not found, using config.example.yaml")
    return load_config(config_path)


def main(argv: list[str] | None = None) -> int:
    """Entry point: dispatch to review/fetch/install or clean."""
    args = parse_args(argv)
    config = _load(args.config)

    review_logging = ReviewLogging(config.logging)
    review_logging.setup()
    log = review_logging.get_logger("typst_review")

    if args.check:
        print("Config OK:", config.repository.path, config.toolchain.command)
        return 0

    workspace = Workspace.from_config(config)
    vcs = GitVersionControl(timeout=config.git.timeout, log=review_logging.get_logger("typst_review.git"))
    toolchain = TypstToolchain(
        command=config.toolchain.command,
        timeout=config.toolchain.timeout,
        viewer=config.toolchain.viewer,
        package_path=workspace.install_root,
        log=review_logging.get_logger("typst_review.typst"),
    )

    if args.subcommand == "clean":
        try:
            clean_workspace(workspace, vcs, log=log)
        except (ReviewError, OSError) as e:
            log.error("Clean failed: %s", e)
            return 1
        return 0

    try:
        spec = parse_pull_request(" ".join(args.title))
    except ParseError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    try:
        report = run_review(
            spec,
            workspace,
            vcs,
            toolchain,
            mode=ReviewMode(args.subcommand),
            default_entrypoint=config.toolchain.default_entrypoint,
            open_output=config.toolchain.open_output,
            log=log,
        )
    except KeyboardInterrupt:
        log.warning("Interrupted")
        return 1

    print(render(report, color=config.output.color), end="")
    return exit_code(report)


if __name__ == "__main__":
    sys.exit(main())
