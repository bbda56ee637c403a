from __future__ import annotations

import json
from pathlib import Path

import pytest

from context_tree import cli


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("CONTEXT_TREE_ADDITIONAL_EXCLUDE_DIRS", "CONTEXT_TREE_MAX_DEPTH", "CONTEXT_TREE_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    (tmp_path / ".gitignore").write_text("build/\n", encoding="utf-8")
    (tmp_path / "build").mkdir()
    (tmp_path / "build" / "out.txt").write_text("compiled", encoding="utf-8")
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.go").write_text("package main", encoding="utf-8")
    (tmp_path / "src" / "logo.png").write_bytes(b"\x89PNG")
    (tmp_path / "README.md").write_text("Hello, world!", encoding="utf-8")
    return tmp_path


@pytest.mark.end2end
def test_tree_command_prints_json_payload(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli.main(["tree", "--root", str(repo)])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload == {
        "README.md": {"token_count": 3},
        "src": {"token_count": 1, "children": {"main.go": {"token_count": 1}}},
    }


@pytest.mark.end2end
def test_tree_command_text_format(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli.main(["tree", "--root", str(repo), "--format", "text", "--max-depth", "0"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "README.md (3 tokens)" in out
    assert "src/ (0 tokens)" in out
    assert "main.go" not in out


@pytest.mark.end2end
def test_files_command_lists_relative_paths(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli.main(["files", "--root", str(repo), "--include-dir", "src", "--include-dir", "build"])

    assert exit_code == 0
    assert capsys.readouterr().out == "src/main.go\n"


@pytest.mark.end2end
def test_tokens_command_fails_when_nothing_readable(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli.main(["tokens", "--root", str(repo), "src/logo.png"])

    assert exit_code == 2
    assert not capsys.readouterr().out
