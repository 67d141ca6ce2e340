"""Configuration loading from YAML and environment.

Every section is a pydantic-settings model, so each value can also be set
through its environment variable (e.g. TOOLCHAIN_COMMAND, REPOSITORY_PATH).
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Injected by load_config so ${VAR} substitution sees the current env
_current_env: dict[str, str] = {}


class RepositoryConfig(BaseSettings):
    """Local checkout of the package monorepo."""

    model_config = SettingsConfigDict(env_prefix="REPOSITORY_", extra="ignore")

    path: str = Field(default="packages", description="Path to the local packages git checkout")
    remote: str = Field(default="origin", description="Remote that hosts pull/<n>/head refs")
    main_branch: str = Field(default="main", description="Branch to return to before fetching")
    namespace: str = Field(default="preview", description="Package namespace under packages/")


class WorkspaceConfig(BaseSettings):
    """Scratch space for scaffolded template projects."""

    model_config = SettingsConfigDict(env_prefix="WORKSPACE_", extra="ignore")

    scratch_dir: str = Field(default="test", description="Directory for throwaway template projects")


class GitConfig(BaseSettings):
    """git CLI settings."""

    model_config = SettingsConfigDict(env_prefix="GIT_", extra="ignore")

    timeout: int | None = Field(default=None, ge=1, description="Timeout per git call in seconds (none by default)")


class ToolchainConfig(BaseSettings):
    """Typst CLI and local package installation settings."""

    model_config = SettingsConfigDict(env_prefix="TOOLCHAIN_", extra="ignore")

    command: str = Field(default="typst", description="typst executable")
    timeout: int | None = Field(default=None, ge=1, description="Timeout per typst call in seconds (none by default)")
    data_dir: str | None = Field(
        default=None,
        description="Base data directory; packages go to <data_dir>/typst/packages (platform default if unset)",
    )
    default_entrypoint: str = Field(default="main.typ", description="Entry document looked up first")
    open_output: bool = Field(default=False, description="Open the compiled PDF after a successful compile")
    viewer: str = Field(default="xdg-open", description="Command used to open compiled PDFs")


class OutputConfig(BaseSettings):
    """Transcript settings."""

    model_config = SettingsConfigDict(env_prefix="OUTPUT_", extra="ignore")

    color: bool = Field(default=False, description="Colorize the transcript with ANSI escapes")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    git: GitConfig = Field(default_factory=GitConfig)
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        # Simple $VAR
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    A missing file yields defaults (still overridable through env).
    """
    global _current_env

    _current_env = dict(os.environ)

    path = config_path or Path("review.yaml")
    if not path.is_file():
        return AppConfig()

    raw = yaml.safe_load(path.read_text()) or {}
    raw = _substitute_env(raw)

    return AppConfig(
        repository=RepositoryConfig(**(raw.get("repository") or {})),
        workspace=WorkspaceConfig(**(raw.get("workspace") or {})),
        git=GitConfig(**(raw.get("git") or {})),
        toolchain=ToolchainConfig(**(raw.get("toolchain") or {})),
        output=OutputConfig(**(raw.get("output") or {})),
        logging=LoggingConfig(**(raw.get("logging") or {})),
    )
