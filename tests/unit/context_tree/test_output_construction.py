from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from context_tree.output_construction import build_tree_lines, render_file_list, render_tree, tree_payload
from context_tree.tree import DirectoryNode, FileNode


@pytest.fixture
def sample_tree() -> DirectoryNode:
    return DirectoryNode(
        children={
            "src": DirectoryNode(
                children={
                    "main.go": FileNode(token_count=1),
                    "util.go": FileNode(token_count=5),
                },
            ),
            "README.md": FileNode(token_count=10),
            "empty": DirectoryNode(),
        },
    )


@pytest.mark.unit
def test_tree_payload_shape(sample_tree: DirectoryNode) -> None:
    payload = tree_payload(sample_tree)

    assert payload == {
        "src": {
            "token_count": 6,
            "children": {"main.go": {"token_count": 1}, "util.go": {"token_count": 5}},
        },
        "README.md": {"token_count": 10},
        "empty": {"token_count": 0, "children": {}},
    }
    assert list(payload) == ["src", "README.md", "empty"]


@pytest.mark.unit
def test_render_tree_json_and_yaml_agree(sample_tree: DirectoryNode) -> None:
    as_json = json.loads(render_tree(sample_tree, "json"))
    as_yaml = yaml.safe_load(render_tree(sample_tree, "yaml"))

    assert as_json == as_yaml == tree_payload(sample_tree)


@pytest.mark.unit
def test_build_tree_lines_renders_counts(sample_tree: DirectoryNode) -> None:
    lines = build_tree_lines("repo", sample_tree)

    assert lines == [
        "repo/ (16 tokens)",
        "├── src/ (6 tokens)",
        "│   ├── main.go (1 tokens)",
        "│   └── util.go (5 tokens)",
        "├── README.md (10 tokens)",
        "└── empty/ (0 tokens)",
    ]


@pytest.mark.unit
def test_render_tree_rejects_unknown_format(sample_tree: DirectoryNode) -> None:
    with pytest.raises(ValueError, match="Unsupported output format"):
        render_tree(sample_tree, "xml")


@pytest.mark.unit
def test_render_file_list_sorts_relative_paths(tmp_path: Path) -> None:
    files = [tmp_path / "src" / "b.py", tmp_path / "README.md", tmp_path / "src" / "a.py"]

    assert render_file_list(tmp_path, files) == "README.md\nsrc/a.py\nsrc/b.py\n"


@pytest.mark.unit
def test_render_file_list_keeps_outside_paths_absolute(tmp_path: Path) -> None:
    root = tmp_path / "repo"
    outside = tmp_path / "sib" / "x.py"

    assert render_file_list(root, [root / "a.py", outside]) == f"{outside.as_posix()}\na.py\n"
