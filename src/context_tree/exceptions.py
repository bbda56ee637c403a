from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ContextTreeError(Exception):
    """Base exception for errors in the context_tree package."""


@dataclass(frozen=True)
class FileProcessingError(ContextTreeError):
    """Raised when a file cannot be read for a reason not covered below."""

    path: Path
    message: str = "The file could not be read."


@dataclass(frozen=True)
class PathOutsideBaseError(ContextTreeError):
    """Raised when a requested path escapes the codebase directory."""

    path: Path
    base_dir: Path
    message: str = "The path is outside the base directory."


@dataclass(frozen=True)
class RepoFileNotFoundError(ContextTreeError):
    """Raised when a requested file does not exist."""

    path: Path
    message: str = "File not found."


@dataclass(frozen=True)
class PathIsDirectoryError(ContextTreeError):
    """Raised when a file read is requested on a directory."""

    path: Path
    message: str = "The path is a directory."


@dataclass(frozen=True)
class BinaryFileError(ContextTreeError):
    """Raised when a file read is requested on a binary file."""

    path: Path
    message: str = "The file is binary."


@dataclass(frozen=True)
class FileTooLargeError(ContextTreeError):
    """Raised when a file exceeds the configured read limit."""

    path: Path
    size: int
    limit: int
    message: str = "The file is too large."


@dataclass(frozen=True)
class NoReadableFilesError(ContextTreeError):
    """Raised when none of the requested files could be read."""

    message: str = "No valid files could be read."
