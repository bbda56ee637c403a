from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

from context_tree.config import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_FILE_BYTES,
    ENV_ADDITIONAL_EXCLUDE_DIRS,
    ENV_CODEBASE_DIR,
    ENV_LOG_FILE,
    ENV_LOG_LEVEL,
    ENV_MAX_DEPTH,
    ENV_MAX_FILE_BYTES,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

ENV_FILE = find_dotenv(usecwd=True)


class Settings(BaseModel):
    """Configuration settings for the context_tree package."""

    root: Path = Field(default_factory=Path.cwd, description="Codebase root directory.")
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=0, description="Summary tree depth bound.")
    additional_excludes: str = Field(default="", description="Comma list of extra ignore patterns.")
    max_file_bytes: int = Field(
        default=DEFAULT_MAX_FILE_BYTES,
        gt=0,
        description="Files above are refused by the reader.",
    )
    log_file: str = Field(default="", description="Log file path.")
    log_level: str = Field(default="INFO", description="Minimum log level.")

    command: str = Field(default="tree", description="CLI subcommand.")
    format: str = Field(default="json", description="Tree output format (json, yaml, text).")
    include_dir: list[str] = Field(default_factory=list, description="Subdirectories to list files from.")
    paths: list[str] = Field(default_factory=list, description="Files to estimate tokens for.")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> Settings:  # noqa: ANN401
        """Build settings from environment variables, then apply explicit overrides.

        When `environ` is None, the nearest `.env` file is loaded into the
        process environment first (existing variables win) and `os.environ` is read.

        Args:
            environ: mapping to read variables from instead of the process environment
            **overrides: field values that take precedence over the environment

        Returns:
            Settings: the populated settings
        """
        if environ is None:
            if ENV_FILE:
                load_dotenv(ENV_FILE, override=False)
            environ = os.environ

        values: dict[str, Any] = {}
        if root := environ.get(ENV_CODEBASE_DIR):
            values["root"] = Path(root)
        if ENV_ADDITIONAL_EXCLUDE_DIRS in environ:
            values["additional_excludes"] = environ[ENV_ADDITIONAL_EXCLUDE_DIRS]
        if level := environ.get(ENV_LOG_LEVEL):
            values["log_level"] = level
        if log_file := environ.get(ENV_LOG_FILE):
            values["log_file"] = log_file
        values["max_depth"] = env_int(environ, ENV_MAX_DEPTH, DEFAULT_MAX_DEPTH, minimum=0)
        values["max_file_bytes"] = env_int(environ, ENV_MAX_FILE_BYTES, DEFAULT_MAX_FILE_BYTES, minimum=1)

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def env_int(
    environ: Mapping[str, str],
    key: str,
    default: int,
    *,
    minimum: int | None = None,
) -> int:
    """Read an integer variable, falling back to `default` when absent, malformed or too small.

    Args:
        environ: the variables to read from
        key: variable name
        default: value used when the variable is missing or not an integer
        minimum: smallest accepted value, if any

    Returns:
        int: the parsed value or `default`
    """
    raw = environ.get(key)
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    if minimum is not None and value < minimum:
        return default
    return value
