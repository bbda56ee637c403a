from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from context_tree.ignore_rules import PatternSource, RuleSet
from context_tree.tree import DirectoryNode, FileNode, summarize_directory

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


def write(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def assert_aggregates(node: DirectoryNode) -> None:
    assert node.token_count == sum(child.token_count for child in node.children.values())
    for child in node.children.values():
        if isinstance(child, DirectoryNode):
            assert_aggregates(child)


@pytest.mark.unit
def test_directory_node_sums_children() -> None:
    node = DirectoryNode(
        children={
            "a.py": FileNode(token_count=3),
            "pkg": DirectoryNode(children={"b.py": FileNode(token_count=4)}),
        },
    )

    assert node.token_count == 7
    assert node.to_payload() == {
        "token_count": 7,
        "children": {
            "a.py": {"token_count": 3},
            "pkg": {"token_count": 4, "children": {"b.py": {"token_count": 4}}},
        },
    }


@pytest.mark.unit
def test_max_depth_zero_lists_root_only(tmp_path: Path) -> None:
    write(tmp_path / "a" / "b.txt", "some words here to count")

    tree = summarize_directory(tmp_path, RuleSet(), max_depth=0)

    child = tree.children["a"]
    assert isinstance(child, DirectoryNode)
    assert child.children == {}
    assert child.token_count == 0


@pytest.mark.unit
def test_depth_bound_undercounts_ancestors(tmp_path: Path) -> None:
    write(tmp_path / "top.txt", "one two three four")
    write(tmp_path / "a" / "mid.txt", "one two three four")
    write(tmp_path / "a" / "b" / "deep.txt", "one two three four")

    tree = summarize_directory(tmp_path, RuleSet(), max_depth=1)

    a = tree.children["a"]
    assert isinstance(a, DirectoryNode)
    assert a.token_count == 3
    assert a.children["b"].token_count == 0
    assert tree.token_count == 6
    assert_aggregates(tree)


@pytest.mark.unit
def test_hidden_binary_and_image_entries_are_omitted(tmp_path: Path) -> None:
    write(tmp_path / ".env", "SECRET=1")
    write(tmp_path / ".hidden" / "x.txt", "hidden words")
    write(tmp_path / "logo.png", "png")
    (tmp_path / "data.txt").write_bytes(b"abc\x00def")
    write(tmp_path / "lib.so", "elf")
    write(tmp_path / "main.py", "print('hello world')")

    tree = summarize_directory(tmp_path, RuleSet())

    assert list(tree.children) == ["main.py"]
    assert tree.children["main.py"] == FileNode(token_count=2)


@pytest.mark.unit
def test_ignored_entries_are_skipped(tmp_path: Path) -> None:
    write(tmp_path / "build" / "out.txt", "generated")
    write(tmp_path / "src" / "app.log", "noise")
    write(tmp_path / "src" / "app.py", "x = 1")
    rule_set = RuleSet.from_sources(
        PatternSource(pattern=p, base_dir=str(tmp_path)) for p in ("build/", "*.log")
    )

    tree = summarize_directory(tmp_path, rule_set)

    assert "build" not in tree.children
    src = tree.children["src"]
    assert isinstance(src, DirectoryNode)
    assert list(src.children) == ["app.py"]


@pytest.mark.unit
def test_children_follow_name_order(tmp_path: Path) -> None:
    write(tmp_path / "b.txt", "w")
    write(tmp_path / "c" / "f.txt", "w")
    write(tmp_path / "a.txt", "w")

    tree = summarize_directory(tmp_path, RuleSet())

    assert list(tree.children) == ["a.txt", "b.txt", "c"]


@pytest.mark.unit
def test_unlistable_directory_counts_as_empty(tmp_path: Path, mocker: MockerFixture) -> None:
    logger = mocker.Mock()

    tree = summarize_directory(tmp_path / "missing", RuleSet(), logger=logger)

    assert tree.children == {}
    assert tree.token_count == 0
    logger.warning.assert_called_once()


@pytest.mark.unit
@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
def test_directory_loop_is_not_followed(tmp_path: Path) -> None:
    write(tmp_path / "a" / "f.txt", "one two three four")
    try:
        (tmp_path / "a" / "back").symlink_to(tmp_path, target_is_directory=True)
    except OSError:
        pytest.skip("cannot create symlinks here")

    tree = summarize_directory(tmp_path, RuleSet())

    a = tree.children["a"]
    assert isinstance(a, DirectoryNode)
    assert a.children["back"] == DirectoryNode()
    assert tree.token_count == 3
