"""Typst package manifest (typst.toml) model and loader."""

import tomllib
from pathlib import Path
from typing import List

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from typst_review.errors import ToolchainError

MANIFEST_NAME = "typst.toml"


class PackageInfo(BaseModel):
    """The [package] table; only the fields the review needs are typed."""

    model_config = ConfigDict(extra="allow")

    name: str
    version: str
    entrypoint: str
    exclude: List[str] = Field(default_factory=list)


class TemplateInfo(BaseModel):
    """The [template] table of a template package."""

    model_config = ConfigDict(extra="allow")

    path: str
    entrypoint: str
    thumbnail: str | None = None


class PackageManifest(BaseModel):
    model_config = ConfigDict(extra="allow")

    package: PackageInfo
    template: TemplateInfo | None = None


def manifest_path(package_dir: Path) -> Path:
    return Path(package_dir) / MANIFEST_NAME


def load_manifest(package_dir: Path) -> PackageManifest:
    """Read and validate <package_dir>/typst.toml.

    Raises:
        ToolchainError: If the manifest is missing, not UTF-8, not valid
            TOML, or lacks required fields.
    """
    path = manifest_path(package_dir)
    try:
        raw = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ToolchainError("failed to read package manifest", f"{path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ToolchainError("failed to parse package manifest", f"{path}: {e}") from e
    try:
        return PackageManifest.model_validate(raw)
    except ValidationError as e:
        raise ToolchainError("failed to parse package manifest", f"{path}: {e}") from e
