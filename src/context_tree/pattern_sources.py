from __future__ import annotations

import os
from typing import TYPE_CHECKING

from context_tree.config import DEFAULT_IGNORE_PATTERNS, GITIGNORE_FILENAME
from context_tree.file_manipulation import normalize_path
from context_tree.ignore_rules import PatternSource, RuleSet
from context_tree.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    import structlog

    from context_tree.file_manipulation import StrPath


def parse_exclude_list(excludes: str | Sequence[str] | None) -> list[str]:
    """Split a comma-separated exclude list into trimmed, non-empty patterns.

    Args:
        excludes: a comma-separated string, or a sequence of such strings

    Returns:
        list[str]: the patterns, in declaration order
    """
    if not excludes:
        return []
    chunks = [excludes] if isinstance(excludes, str) else list(excludes)
    out: list[str] = []
    for chunk in chunks:
        for item in (chunk or "").split(","):
            item = item.strip()  # noqa: PLW2901
            if item:
                out.append(item)
    return out


def read_gitignore_file(path: StrPath) -> list[PatternSource]:
    """Read the patterns of one `.gitignore` file.

    Blank lines and `#` comments are dropped, the others are trimmed and
    scoped to the directory holding the file.

    Args:
        path: path of the `.gitignore` file

    Raises:
        OSError: if the file cannot be opened or read

    Returns:
        list[PatternSource]: the patterns, in file order
    """
    base_dir = os.path.dirname(normalize_path(path))
    patterns: list[PatternSource] = []
    with open(path, encoding="utf-8", errors="replace") as f:
        for line in f:
            stripped = line.strip()
            if stripped and not stripped.startswith("#"):
                patterns.append(PatternSource(pattern=stripped, base_dir=base_dir))
    return patterns


def collect_gitignore_patterns(
    root: StrPath,
    logger: structlog.BoundLogger | None = None,
) -> list[PatternSource]:
    """Gather the patterns of every `.gitignore` reachable from `root`.

    Directories are visited depth-first in pre-order, siblings in name order.
    Hidden directories and symlinks to directories are not entered, so every
    pattern is scoped to the directory that really holds its `.gitignore`.

    Args:
        root: the directory to start from
        logger: logger for unreadable files or directories; the package logger when None

    Returns:
        list[PatternSource]: the patterns in discovery order
    """
    log = logger or get_logger()
    patterns: list[PatternSource] = []
    stack = [normalize_path(root)]
    while stack:
        directory = stack.pop()
        gitignore = os.path.join(directory, GITIGNORE_FILENAME)
        try:
            patterns.extend(read_gitignore_file(gitignore))
        except FileNotFoundError:
            pass
        except OSError as e:
            log.warning("Unable to read %s: %s", gitignore, e)

        try:
            with os.scandir(directory) as it:
                subdirs = sorted(
                    entry.path
                    for entry in it
                    if not entry.name.startswith(".") and entry.is_dir(follow_symlinks=False)
                )
        except OSError as e:
            log.warning("Unable to list %s: %s", directory, e)
            continue
        stack.extend(reversed(subdirs))
    return patterns


def collect_pattern_sources(
    root: StrPath,
    additional_excludes: str | Sequence[str] | None = "",
    logger: structlog.BoundLogger | None = None,
) -> list[PatternSource]:
    """Gather every ignore pattern that applies under `root`.

    The order is fixed: built-in defaults, then the user excludes, then the
    `.gitignore` patterns in directory-walk order.

    Args:
        root: the codebase directory
        additional_excludes: extra patterns, comma-separated
        logger: logger for unreadable files or directories; the package logger when None

    Returns:
        list[PatternSource]: the patterns, in precedence order
    """
    base_dir = normalize_path(root)
    sources = [PatternSource(pattern=p, base_dir=base_dir) for p in DEFAULT_IGNORE_PATTERNS]
    sources.extend(
        PatternSource(pattern=p, base_dir=base_dir) for p in parse_exclude_list(additional_excludes)
    )
    sources.extend(collect_gitignore_patterns(base_dir, logger=logger))
    return sources


def build_rule_set(
    root: StrPath,
    additional_excludes: str | Sequence[str] | None = "",
    logger: structlog.BoundLogger | None = None,
) -> RuleSet:
    """Collect and compile the ignore rules for `root`."""
    return RuleSet.from_sources(
        collect_pattern_sources(root, additional_excludes, logger=logger),
        logger=logger,
    )
