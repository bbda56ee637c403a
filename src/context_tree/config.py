from __future__ import annotations

from enum import StrEnum, auto


class FileKind(StrEnum):
    """Coarse classification of a file for tree and listing decisions.

    Images are a subset of what the binary check flags by extension, but the
    two are kept apart: the summary tree drops both, the eligible-file listing
    only drops images.
    """

    TEXT = auto()
    BINARY = auto()
    IMAGE = auto()


DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    "poetry.lock",
    "package-lock.json",
    ".DS_Store",
    ".git",
)

BINARY_EXTENSIONS: frozenset[str] = frozenset({
    ".pyc",
    ".pyo",
    ".pyd",
    ".ico",
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".svg",
    ".core",
    ".bin",
    ".exe",
    ".dll",
    ".so",
    ".dylib",
    ".class",
    ".woff",
    ".woff2",
    ".ttf",
    ".eot",
    ".zip",
})

IMAGE_EXTENSIONS: frozenset[str] = frozenset({
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".bmp",
    ".svg",
    ".ico",
})

GITIGNORE_FILENAME = ".gitignore"

# Number of leading bytes inspected for NUL when sniffing binary content.
BINARY_SNIFF_BYTES = 1024

TOKEN_PUNCTUATION: frozenset[str] = frozenset(".,!?;:")
TOKEN_RATIO = 0.75

DEFAULT_MAX_DEPTH = 15
DEFAULT_MAX_FILE_BYTES = 1024 * 1024

ENV_PREFIX = "CONTEXT_TREE_"
ENV_CODEBASE_DIR = f"{ENV_PREFIX}CODEBASE_DIR"
ENV_ADDITIONAL_EXCLUDE_DIRS = f"{ENV_PREFIX}ADDITIONAL_EXCLUDE_DIRS"
ENV_MAX_DEPTH = f"{ENV_PREFIX}MAX_DEPTH"
ENV_LOG_LEVEL = f"{ENV_PREFIX}LOG_LEVEL"
ENV_LOG_FILE = f"{ENV_PREFIX}LOG_FILE"
ENV_MAX_FILE_BYTES = f"{ENV_PREFIX}MAX_FILE_BYTES"
