#!/usr/bin/env python3
"""
EXIF Batch Utilities
Input validation, JPEG discovery and backup helpers shared by the batch
timestamp setter.
"""

import re
import shutil
from pathlib import Path
from typing import Iterator, Union

JPEG_EXTENSIONS = {".jpg", ".jpeg"}
BACKUP_SUFFIX = ".bak"

# "YYYY:MM:DD HH:MM:SS" => 19 chars
EXIF_DATETIME_PATTERN = re.compile(
    r"[0-9]{4}:[0-9]{2}:[0-9]{2} [0-9]{2}:[0-9]{2}:[0-9]{2}"
)


class ValidationError(ValueError):
    """Exception raised when run inputs are rejected before any file is touched."""

    pass


class TimestampFormatError(ValidationError):
    """Exception raised when the timestamp is not in EXIF datetime format."""

    pass


class RootDirectoryError(ValidationError):
    """Exception raised when the root is missing or not a directory."""

    pass


class BackupError(Exception):
    """Base exception for failures while backing up a single file."""

    pass


class BackupAlreadyExistsError(BackupError):
    """Exception raised when a backup for the file is already on disk."""

    def __init__(self, backup_path: Path):
        super().__init__(f"backup already exists: {backup_path}")
        self.backup_path = backup_path


class BackupIOError(BackupError):
    """Exception raised when copying the file to its backup fails."""

    pass


def is_valid_exif_datetime(timestamp: str) -> bool:
    """
    Check that a string is a lexically valid EXIF datetime.

    Only positions are checked: digits everywhere except the colons at
    indices 4, 7, 13, 16 and the space at index 10. Calendar values such
    as month 13 are accepted.

    Args:
        timestamp: Candidate datetime string

    Returns:
        True if the string matches 'YYYY:MM:DD HH:MM:SS'
    """
    return EXIF_DATETIME_PATTERN.fullmatch(timestamp) is not None


def validate_timestamp(timestamp: str) -> None:
    """Raise TimestampFormatError unless timestamp is 'YYYY:MM:DD HH:MM:SS'."""
    if not is_valid_exif_datetime(timestamp):
        raise TimestampFormatError(
            f'Invalid datetime. Expected: "YYYY:MM:DD HH:MM:SS", got: {timestamp!r}'
        )


def validate_root(root: Union[str, Path]) -> Path:
    """
    Check that the root exists and is a directory.

    Args:
        root: Directory to process

    Returns:
        The root as a Path

    Raises:
        RootDirectoryError: If the root is missing or not a directory
    """
    root_path = Path(root)
    if not root_path.is_dir():
        raise RootDirectoryError(
            f"Folder does not exist or is not a directory: {root_path}"
        )
    return root_path


def iter_candidate_files(root: Path, recursive: bool = False) -> Iterator[Path]:
    """
    Lazily yield regular files under root.

    Only direct children are yielded unless recursive is set. Directories,
    symlinks to directories and special files are never yielded. The
    generator is single-pass and its order is whatever the filesystem gives.

    Args:
        root: Directory to scan
        recursive: Descend into subdirectories when True

    Yields:
        Path of each regular file found
    """
    entries = root.rglob("*") if recursive else root.iterdir()
    for entry in entries:
        if entry.is_file():
            yield entry


def is_jpeg_path(file_path: Path) -> bool:
    """Check if a file has a .jpg or .jpeg extension, ignoring case."""
    return file_path.suffix.lower() in JPEG_EXTENSIONS


def backup_path_for(file_path: Path) -> Path:
    """Return the backup path: the full file name with '.bak' appended."""
    return file_path.with_name(file_path.name + BACKUP_SUFFIX)


def ensure_backup(file_path: Path) -> Path:
    """
    Copy a file byte for byte to its '.bak' sibling before it is modified.

    An existing backup is never overwritten. The destination is opened in
    exclusive-create mode, so a backup that appears between the existence
    check and the copy is still refused. A partially written backup is left
    on disk if the copy fails.

    Args:
        file_path: File about to be modified

    Returns:
        Path of the newly created backup

    Raises:
        BackupAlreadyExistsError: If the backup path already exists
        BackupIOError: If either file cannot be opened or the copy fails
    """
    backup_path = backup_path_for(file_path)
    if backup_path.exists():
        raise BackupAlreadyExistsError(backup_path)

    try:
        source_handle = open(file_path, "rb")
    except OSError as e:
        raise BackupIOError(f"failed to open source for backup: {e}") from e

    with source_handle:
        try:
            destination_handle = open(backup_path, "xb")
        except FileExistsError as e:
            raise BackupAlreadyExistsError(backup_path) from e
        except OSError as e:
            raise BackupIOError(f"failed to open destination for backup: {e}") from e

        try:
            with destination_handle:
                shutil.copyfileobj(source_handle, destination_handle)
        except OSError as e:
            raise BackupIOError(f"failed while writing backup: {e}") from e

    return backup_path
