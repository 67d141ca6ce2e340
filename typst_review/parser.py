"""Parse a pasted PR title into a PullRequestSpec.

Accepted shape (tolerant, natural-language list)::

    name:1.0.0, other:0.2.1 and last:3.0.0-rc.1 #1234

Grammar, after tokenizing into whitespace, commas, `#` references and words::

    title     := entry (separator+ entry)* separator* reference
    separator := "," | "and" | whitespace
    entry     := name ":" version
    reference := "#" digits

Parsing is pure; it never touches the filesystem or network.
"""

import re
from typing import Iterator, List, Tuple

from typst_review.errors import EmptyPackageList, MalformedEntry, MissingPrNumber
from typst_review.models import PackageSpec, PullRequestSpec

_TOKEN_RE = re.compile(
    r"""
    (?P<space>\s+)
    | (?P<comma>,)
    | (?P<reference>\#[^\s,]*)
    | (?P<word>[^\s,\#]+)
    """,
    re.VERBOSE,
)

_AND = "and"
_NAME_RE = re.compile(r"^[^\s:,#]+$")
# Numeric dotted core; anything after `-` or `+` is passed through opaquely.
_VERSION_RE = re.compile(r"^\d+(\.\d+)*([-+][0-9A-Za-z.+\-]*)?$")
_REFERENCE_RE = re.compile(r"^#(\d+)$")


def _tokenize(raw: str) -> Iterator[Tuple[str, str]]:
    """Yield (kind, text) for every token; separators are dropped."""
    for match in _TOKEN_RE.finditer(raw):
        kind = match.lastgroup
        text = match.group()
        if kind in ("space", "comma"):
            continue
        if kind == "word" and text == _AND:
            continue
        yield kind, text


def parse_entry(text: str) -> PackageSpec:
    """Parse one `name:version` token.

    Raises:
        MalformedEntry: If the colon is missing, doubled, or either side is
            not a valid name / version.
    """
    if text.count(":") != 1:
        raise MalformedEntry(text, "package name and version must be separated by a single `:`")
    name, version = text.split(":")
    if not _NAME_RE.match(name):
        raise MalformedEntry(text, "package name is empty or invalid")
    if not _VERSION_RE.match(version):
        raise MalformedEntry(text, "package version is not a dotted version number")
    return PackageSpec(name=name, version=version)


def parse_pull_request(raw: str) -> PullRequestSpec:
    """Turn a PR title like `a:1.0.0, b:2.0.0 and c:0.1.0 #42` into a PullRequestSpec.

    Args:
        raw: Free-form PR title text (CLI arguments joined with spaces).

    Returns:
        PullRequestSpec with packages in input order; duplicates are kept.

    Raises:
        MalformedEntry: A token is neither a package entry nor a valid
            reference, or something follows the PR reference.
        MissingPrNumber: No `#<number>` reference.
        EmptyPackageList: A reference but no package entries.
    """
    packages: List[PackageSpec] = []
    number: int | None = None

    for kind, text in _tokenize(raw):
        if number is not None:
            raise MalformedEntry(text, "nothing may follow the PR number")
        if kind == "reference":
            match = _REFERENCE_RE.match(text)
            if not match or int(match.group(1)) == 0:
                raise MalformedEntry(text, "PR number must be `#` followed by a positive integer")
            number = int(match.group(1))
            continue
        packages.append(parse_entry(text))

    if number is None:
        raise MissingPrNumber()
    if not packages:
        raise EmptyPackageList()
    return PullRequestSpec(number=number, packages=tuple(packages))
