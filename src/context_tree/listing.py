from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from context_tree.file_manipulation import is_image_file, normalize_path, relpath
from context_tree.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    import structlog

    from context_tree.file_manipulation import StrPath
    from context_tree.ignore_rules import RuleSet


def list_eligible_files(
    root: StrPath,
    rule_set: RuleSet,
    included_subdirs: Sequence[StrPath],
    logger: structlog.BoundLogger | None = None,
) -> set[Path]:
    """Collect the candidate files under the included subdirectories of `root`.

    Each subdirectory is walked without depth bound. Hidden and ignored entries
    are skipped (an ignored directory with its whole subtree), and so are
    images. Binary files are kept: whoever reads the files rejects them.
    Symlinked directories are followed unless they point back to a directory
    on the path that led to them. Subdirectories outside `root` are skipped.

    Args:
        root: the codebase directory
        rule_set: the ignore rules to apply
        included_subdirs: subdirectories to walk, relative to `root`
        logger: logger for skipped or unreadable directories; the package logger when None

    Returns:
        set[Path]: absolute paths of the eligible files
    """
    log = logger or get_logger()
    base = normalize_path(root)
    found: set[Path] = set()

    for rel in included_subdirs:
        start = normalize_path(os.path.join(base, rel))
        if relpath(start, base) is None:
            log.warning("Skipping %s: outside of %s", start, base)
            continue
        if not os.path.lexists(start):
            log.warning("Error walking directory %s: no such file or directory", start)
            continue

        stack: list[tuple[str, frozenset[str]]] = [(start, frozenset())]
        while stack:
            path, ancestors = stack.pop()
            is_dir = os.path.isdir(path)
            if path != base:
                if os.path.basename(path).startswith("."):
                    continue
                if rule_set.evaluate(path, is_dir=is_dir):
                    continue
            if not is_dir:
                if not is_image_file(path):
                    found.add(Path(path))
                continue

            real = os.path.realpath(path)
            if real in ancestors:
                log.debug("Not following directory loop at %s", path)
                continue
            try:
                with os.scandir(path) as it:
                    names = sorted(entry.name for entry in it)
            except OSError as e:
                log.warning("Error walking directory %s: %s", path, e)
                continue
            below = ancestors | {real}
            stack.extend((os.path.join(path, name), below) for name in reversed(names))
    return found
