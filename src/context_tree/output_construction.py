from __future__ import annotations

import io
import json
from typing import TYPE_CHECKING, Any

import yaml

from context_tree.file_manipulation import relpath
from context_tree.tree import DirectoryNode

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from context_tree.tree import TreeNode

OUTPUT_FORMATS = ("json", "yaml", "text")


def tree_payload(root: DirectoryNode) -> dict[str, Any]:
    """Build the serializable mapping for the children of the root node.

    Files map to ``{"token_count": n}`` and directories to
    ``{"token_count": n, "children": {...}}``.

    Args:
        root: the summary tree of the codebase directory

    Returns:
        dict[str, Any]: entry name to node payload, in tree order
    """
    return {name: child.to_payload() for name, child in root.children.items()}


def build_tree_lines(root_name: str, root: DirectoryNode) -> list[str]:
    """Build a visual tree representation with token counts.

    Args:
        root_name: the name to use for the root of the tree
        root: the summary tree to render

    Returns:
        list[str]: one string per line, suitable for printing
    """
    lines: list[str] = [f"{root_name}/ ({root.token_count} tokens)"]

    def walk(children: dict[str, TreeNode], prefix: str) -> None:
        items = list(children.items())
        for idx, (name, node) in enumerate(items):
            last = idx == len(items) - 1
            branch = "└── " if last else "├── "
            if isinstance(node, DirectoryNode):
                lines.append(f"{prefix}{branch}{name}/ ({node.token_count} tokens)")
                walk(node.children, prefix + ("    " if last else "│   "))
            else:
                lines.append(f"{prefix}{branch}{name} ({node.token_count} tokens)")

    walk(root.children, "")
    return lines


def render_tree(root: DirectoryNode, fmt: str = "json", *, root_name: str = ".") -> str:
    """Render the summary tree in one of the supported output formats.

    Args:
        root: the summary tree
        fmt: "json", "yaml" or "text"
        root_name: label of the root line in text output

    Raises:
        ValueError: if `fmt` is not a supported format

    Returns:
        str: the rendered tree, newline-terminated
    """
    if fmt == "json":
        return json.dumps(tree_payload(root), indent=2, ensure_ascii=False) + "\n"
    if fmt == "yaml":
        return yaml.safe_dump(tree_payload(root), sort_keys=False, allow_unicode=True)
    if fmt == "text":
        return "\n".join(build_tree_lines(root_name, root)) + "\n"
    msg = f"Unsupported output format: {fmt!r}"
    raise ValueError(msg)


def render_file_list(root: Path, files: Iterable[Path]) -> str:
    """Render eligible files as sorted root-relative POSIX paths, one per line.

    Files outside `root` keep their absolute path.
    """
    out = io.StringIO()
    rels = sorted((relpath(f, root) or f.as_posix() for f in files), key=str.lower)
    for rel in rels:
        out.write(rel + "\n")
    return out.getvalue()
