from __future__ import annotations

import os
from functools import cached_property
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from context_tree.config import DEFAULT_MAX_DEPTH
from context_tree.file_manipulation import estimate_file_tokens, is_binary_file, is_image_file, normalize_path
from context_tree.logging import get_logger

if TYPE_CHECKING:
    import structlog

    from context_tree.file_manipulation import StrPath
    from context_tree.ignore_rules import RuleSet


class FileNode(BaseModel):
    """A file of the summary tree with its estimated token count."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["file"] = "file"
    token_count: int = Field(default=0, ge=0)

    def to_payload(self) -> dict[str, Any]:
        return {"token_count": self.token_count}


class DirectoryNode(BaseModel):
    """A directory of the summary tree.

    Its token count is always the sum over the children that were enumerated;
    a directory beyond the depth bound has no children and counts 0.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["directory"] = "directory"
    children: dict[str, TreeNode] = Field(default_factory=dict)

    @computed_field
    @cached_property
    def token_count(self) -> int:
        """Aggregate token count of the enumerated children."""
        return sum(child.token_count for child in self.children.values())

    def to_payload(self) -> dict[str, Any]:
        return {
            "token_count": self.token_count,
            "children": {name: child.to_payload() for name, child in self.children.items()},
        }


TreeNode = FileNode | DirectoryNode

DirectoryNode.model_rebuild()


def summarize_directory(
    root: StrPath,
    rule_set: RuleSet,
    max_depth: int = DEFAULT_MAX_DEPTH,
    logger: structlog.BoundLogger | None = None,
) -> DirectoryNode:
    """Build the token-annotated summary tree of `root`.

    Hidden entries, ignored entries, binary files and images are left out.
    Directories deeper than `max_depth` appear with no children and a count
    of 0, so ancestors undercount what lies below the bound.

    Args:
        root: the directory to summarize
        rule_set: the ignore rules to apply
        max_depth: deepest level whose entries are listed, the root being level 0
        logger: logger for unreadable directories; the package logger when None

    Returns:
        DirectoryNode: the node for `root`
    """
    log = logger or get_logger()
    top = normalize_path(root)
    return DirectoryNode(
        children=_collect_children(top, rule_set, 0, max_depth, frozenset({os.path.realpath(top)}), log),
    )


def _collect_children(
    directory: str,
    rule_set: RuleSet,
    depth: int,
    max_depth: int,
    ancestors: frozenset[str],
    log: structlog.BoundLogger,
) -> dict[str, TreeNode]:
    children: dict[str, TreeNode] = {}
    if depth > max_depth:
        return children

    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        log.warning("Unable to list %s: %s", directory, e)
        return children

    for entry in entries:
        if entry.name.startswith("."):
            continue
        try:
            is_dir = entry.is_dir()
        except OSError:
            is_dir = False
        if rule_set.evaluate(entry.path, is_dir=is_dir):
            continue

        if is_dir:
            real = os.path.realpath(entry.path)
            if real in ancestors:
                log.debug("Not following directory loop at %s", entry.path)
                children[entry.name] = DirectoryNode()
                continue
            children[entry.name] = DirectoryNode(
                children=_collect_children(entry.path, rule_set, depth + 1, max_depth, ancestors | {real}, log),
            )
        elif not is_binary_file(entry.path) and not is_image_file(entry.path):
            children[entry.name] = FileNode(token_count=estimate_file_tokens(entry.path, logger=log))
    return children
