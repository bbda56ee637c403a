"""context-tree: token-annotated, ignore-aware view of a codebase.

Usage
-----
Run `python -m context_tree.cli --help` for full options. Common examples:
    - Summary tree as JSON (the payload an LLM-context front-end consumes):
        context-tree tree --root path/to/repo

    - Text tree with counts, shallower and with extra excludes:
        context-tree tree --format text --max-depth 3 --exclude "dist,*.min.js"

    - Candidate files under selected subdirectories:
        context-tree files --include-dir src --include-dir tests

    - Estimate tokens of some files, or of stdin:
        context-tree tokens src/app.py README.md
        echo "Hello, world!" | context-tree tokens
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from context_tree import __version__
from context_tree.exceptions import NoReadableFilesError
from context_tree.file_manipulation import estimate_tokens, normalize_path, read_files
from context_tree.listing import list_eligible_files
from context_tree.logging import setup_logging
from context_tree.output_construction import OUTPUT_FORMATS, render_file_list, render_tree
from context_tree.pattern_sources import build_rule_set
from context_tree.settings import Settings
from context_tree.tree import summarize_directory

if TYPE_CHECKING:
    from collections.abc import Sequence

    import structlog


def build_parser(defaults: Settings) -> argparse.ArgumentParser:
    """Build the argument parser, using `defaults` (usually from the environment) as defaults.

    Args:
        defaults: settings providing default values for the shared options

    Returns:
        argparse.ArgumentParser: the configured parser
    """
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--root", type=str, default=str(defaults.root), help="Codebase root directory.")
    common.add_argument(
        "--exclude",
        dest="additional_excludes",
        type=str,
        default=defaults.additional_excludes,
        help="Comma list of extra ignore patterns.",
    )
    common.add_argument("--log-file", type=str, default=defaults.log_file, help="Log file path.")
    common.add_argument("--log-level", type=str, default=defaults.log_level, help="Minimum log level.")

    p = argparse.ArgumentParser(
        prog="context-tree",
        description="Summarize a codebase as an ignore-aware tree with token estimates.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="command", required=True)

    tree = sub.add_parser("tree", parents=[common], help="Print the token-annotated summary tree.")
    tree.add_argument(
        "--max-depth",
        type=int,
        default=defaults.max_depth,
        help="Deepest directory level whose entries are listed (root is 0).",
    )
    tree.add_argument("--format", type=str, choices=OUTPUT_FORMATS, default="json", help="Output format.")

    files = sub.add_parser("files", parents=[common], help="List eligible files of included subdirectories.")
    files.add_argument(
        "--include-dir",
        action="append",
        default=[],
        required=True,
        help="Subdirectory to list, relative to the root (repeatable).",
    )

    tokens = sub.add_parser("tokens", parents=[common], help="Estimate tokens of files, or of stdin.")
    tokens.add_argument("paths", nargs="*", default=[], help="Files relative to the root.")
    tokens.add_argument(
        "--max-bytes",
        dest="max_file_bytes",
        type=int,
        default=defaults.max_file_bytes,
        help="Files above are skipped.",
    )
    return p


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse command-line arguments into settings, environment values acting as defaults."""
    defaults = Settings.from_env()
    args = build_parser(defaults).parse_args(argv)
    return Settings(**{**defaults.model_dump(), **vars(args)})


def run_tree(settings: Settings, logger: structlog.BoundLogger) -> str:
    root = Path(normalize_path(settings.root))
    rule_set = build_rule_set(root, settings.additional_excludes, logger=logger)
    logger.info("Collected %d ignore rules for %s", len(rule_set.rules), root)
    tree = summarize_directory(root, rule_set, settings.max_depth, logger=logger)
    return render_tree(tree, settings.format, root_name=root.name or str(root))


def run_files(settings: Settings, logger: structlog.BoundLogger) -> str:
    root = Path(normalize_path(settings.root))
    rule_set = build_rule_set(root, settings.additional_excludes, logger=logger)
    files = list_eligible_files(root, rule_set, settings.include_dir, logger=logger)
    logger.info("Found %d eligible files", len(files))
    return render_file_list(root, files)


def run_tokens(settings: Settings, logger: structlog.BoundLogger) -> str:
    """Estimate tokens for the requested files, or for stdin when none are given.

    Raises:
        NoReadableFilesError: if files were requested but none could be read
    """
    if not settings.paths:
        return f"{estimate_tokens(sys.stdin.read())}\n"
    contents = read_files(settings.root, settings.paths, max_bytes=settings.max_file_bytes, logger=logger)
    lines = [f"{estimate_tokens(text)}\t{path}" for path, text in contents.items()]
    total = sum(estimate_tokens(text) for text in contents.values())
    lines.append(f"{total}\ttotal")
    return "\n".join(lines) + "\n"


COMMANDS = {
    "tree": run_tree,
    "files": run_files,
    "tokens": run_tokens,
}


def main(argv: Sequence[str] | None = None) -> int:
    settings = parse_args(argv)
    logger = setup_logging(settings.log_file or None, settings.log_level)

    try:
        output = COMMANDS[settings.command](settings, logger)
    except NoReadableFilesError as e:
        logger.error("%s", e.message)
        return 2

    sys.stdout.write(output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
