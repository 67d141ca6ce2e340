"""Exceptions raised by the parser and by external command runners."""


class ReviewError(Exception):
    """Base class for typst-review errors."""

    pass


class ParseError(ReviewError):
    """Raised when a pasted PR title cannot be turned into a PullRequestSpec."""

    kind = "parse_error"


class MissingPrNumber(ParseError):
    """No `#<number>` reference found in the input."""

    kind = "missing_pr_number"

    def __init__(self) -> None:
        super().__init__("missing PR number, expected `#<number>` after the package list")


class EmptyPackageList(ParseError):
    """The input names no `name:version` entries."""

    kind = "empty_package_list"

    def __init__(self) -> None:
        super().__init__("expected at least one `name:version` package before the PR number")


class MalformedEntry(ParseError):
    """A token could not be read as a package entry or PR reference."""

    kind = "malformed_entry"

    def __init__(self, fragment: str, reason: str = "expected `name:version`") -> None:
        self.fragment = fragment
        self.reason = reason
        super().__init__(f"{reason} - `{fragment}`")


class CommandError(ReviewError):
    """Raised when an external command fails, times out, or is missing.

    ``output`` holds the command's own diagnostic text, unmodified.
    """

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.output = output

    @property
    def diagnostic(self) -> str:
        """Tool output verbatim, or the message when the tool printed nothing."""
        return self.output or str(self)


class GitRunnerError(CommandError):
    """Raised when a git command fails."""

    pass


class ToolchainError(CommandError):
    """Raised when the package toolchain (install, init, compile) fails."""

    pass
