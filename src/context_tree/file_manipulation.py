from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from context_tree.config import (
    BINARY_EXTENSIONS,
    BINARY_SNIFF_BYTES,
    DEFAULT_MAX_FILE_BYTES,
    IMAGE_EXTENSIONS,
    TOKEN_PUNCTUATION,
    TOKEN_RATIO,
    FileKind,
)
from context_tree.exceptions import (
    BinaryFileError,
    ContextTreeError,
    FileProcessingError,
    FileTooLargeError,
    NoReadableFilesError,
    PathIsDirectoryError,
    PathOutsideBaseError,
    RepoFileNotFoundError,
)
from context_tree.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    import structlog

StrPath = str | os.PathLike[str]


def normalize_path(path: StrPath) -> str:
    """Return the absolute form of `path` without resolving symlinks."""
    return os.path.abspath(os.fspath(path))


def relpath(path: StrPath, root: StrPath) -> str | None:
    """Send the relative path of path from root.

    Args:
        path: the path to "relativise"
        root: the root to relativise from

    Returns:
        str | None: the relative path from root to path, with POSIX separators,
            or None when path is not under root.
    """
    try:
        rel = os.path.relpath(normalize_path(path), normalize_path(root))
    except ValueError:
        # different drives on Windows
        return None
    rel = rel.replace(os.sep, "/")
    if rel == ".." or rel.startswith("../"):
        return None
    return rel


def file_extension(path: StrPath) -> str:
    """Lowercased extension of `path`, including the leading dot."""
    return os.path.splitext(os.fspath(path))[1].lower()


def is_image_file(path: StrPath) -> bool:
    """Check if a file is an image, based on its extension only.

    Args:
        path: the file path to check

    Returns:
        bool: True if the extension is a known image extension
    """
    return file_extension(path) in IMAGE_EXTENSIONS


def is_binary_file(path: StrPath) -> bool:
    """Check if a file is binary.

    Directories and paths that cannot be stat'ed are not binary. Known binary
    extensions are binary without reading the file. Otherwise the first
    1024 bytes are read and the file is binary if any of them is NUL.

    Args:
        path: the file path to check

    Returns:
        bool: True if the file is binary, False otherwise (including on read error)
    """
    if not os.path.exists(path) or os.path.isdir(path):
        return False
    if file_extension(path) in BINARY_EXTENSIONS:
        return True
    try:
        with open(path, "rb") as f:
            chunk = f.read(BINARY_SNIFF_BYTES)
    except OSError:
        return False
    return b"\x00" in chunk


def classify_file(path: StrPath) -> FileKind:
    """Categorize a file as image, binary or text.

    Args:
        path: the file path to classify

    Returns:
        FileKind: IMAGE takes precedence over BINARY, anything else is TEXT
    """
    if is_image_file(path):
        return FileKind.IMAGE
    if is_binary_file(path):
        return FileKind.BINARY
    return FileKind.TEXT


def estimate_tokens(text: str) -> int:
    """Approximate the token count of a text.

    Each run of letters or decimal digits counts as one word, and each of
    ``. , ! ? ; :`` counts on its own. The total is scaled by 0.75 and truncated.

    Args:
        text: the text to measure

    Returns:
        int: the approximate token count
    """
    count = 0
    in_word = False
    for ch in text:
        if ch.isalpha() or ch.isdecimal():
            if not in_word:
                count += 1
                in_word = True
        else:
            in_word = False
            if ch in TOKEN_PUNCTUATION:
                count += 1
    return int(count * TOKEN_RATIO)


def estimate_file_tokens(path: StrPath, logger: structlog.BoundLogger | None = None) -> int:
    """Approximate the token count of a file's content.

    Args:
        path: the file to measure
        logger: logger for unreadable files; the package logger when None

    Returns:
        int: 0 for binary or unreadable files, the content estimate otherwise
    """
    if is_binary_file(path):
        return 0
    try:
        content = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        (logger or get_logger()).debug("Unable to read %s: %s", os.fspath(path), e)
        return 0
    return estimate_tokens(content)


def read_file(base_dir: StrPath, rel_path: StrPath, max_bytes: int = DEFAULT_MAX_FILE_BYTES) -> str:
    """Read a text file that lives under `base_dir`.

    Args:
        base_dir: the codebase directory the file must live in
        rel_path: path of the file, relative to `base_dir`
        max_bytes: files larger than this are refused

    Raises:
        PathOutsideBaseError: if `rel_path` escapes `base_dir`
        RepoFileNotFoundError: if the file does not exist
        PathIsDirectoryError: if the path is a directory
        BinaryFileError: if the file is binary
        FileTooLargeError: if the file is larger than `max_bytes`
        FileProcessingError: if the file cannot be stat'ed or read

    Returns:
        str: the file content, decoded as UTF-8 with replacement
    """
    base = Path(base_dir).resolve()
    full = (base / rel_path).resolve()
    if not full.is_relative_to(base):
        raise PathOutsideBaseError(path=Path(rel_path), base_dir=base)
    try:
        st = full.stat()
    except FileNotFoundError as e:
        raise RepoFileNotFoundError(path=Path(rel_path)) from e
    except OSError as e:
        raise FileProcessingError(path=Path(rel_path), message=f"Cannot access file: {e}") from e
    if full.is_dir():
        raise PathIsDirectoryError(path=Path(rel_path))
    if is_binary_file(full):
        raise BinaryFileError(path=Path(rel_path))
    if st.st_size > max_bytes:
        raise FileTooLargeError(path=Path(rel_path), size=st.st_size, limit=max_bytes)
    try:
        return full.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise FileProcessingError(path=Path(rel_path), message=f"Error reading file: {e}") from e


def read_files(
    base_dir: StrPath,
    rel_paths: Sequence[StrPath],
    *,
    max_bytes: int = DEFAULT_MAX_FILE_BYTES,
    logger: structlog.BoundLogger | None = None,
) -> dict[str, str]:
    """Read several files under `base_dir`, skipping the ones that cannot be read.

    Args:
        base_dir: the codebase directory
        rel_paths: file paths relative to `base_dir`
        max_bytes: per-file size limit
        logger: logger for skipped files; the package logger when None

    Raises:
        NoReadableFilesError: if no file at all could be read

    Returns:
        dict[str, str]: mapping of requested path to content, in request order
    """
    log = logger or get_logger()
    contents: dict[str, str] = {}
    for rel in rel_paths:
        key = os.fspath(rel)
        try:
            contents[key] = read_file(base_dir, rel, max_bytes=max_bytes)
        except ContextTreeError as e:
            log.warning("Skipping file %s: %r", key, e)
    if not contents:
        raise NoReadableFilesError
    return contents
