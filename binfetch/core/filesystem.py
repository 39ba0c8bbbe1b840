"""
File system utilities for binfetch.

This module provides the small set of local operations the installer needs:
- Directory creation (idempotent)
- Best-effort file removal for cleanup paths
- Safe zip extraction (directory traversal is refused)
- Marking installed binaries as executable
"""

import logging
import os
import zipfile
from pathlib import Path
from typing import Union

from binfetch.core.exceptions import ExtractError, FileSystemError

logger = logging.getLogger(__name__)

EXECUTABLE_MODE = 0o755


# ============================================================================
# Path Utilities
# ============================================================================


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure directory exists, creating parents if needed.

    Args:
        path: Directory path

    Returns:
        Path object for the directory

    Raises:
        FileSystemError: If the directory cannot be created
    """
    path = Path(path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileSystemError(f"Failed to create directory '{path}': {e}") from e
    return path


def remove_file_quietly(path: Union[str, Path], reason: str = "incomplete") -> bool:
    """
    Remove a file without raising.

    Used on error paths where the original error must keep propagating.
    Failures are logged, never escalated.

    Args:
        path: File to remove
        reason: Short description used in the log message

    Returns:
        True if the file is gone afterwards, False if removal failed
    """
    path = Path(path)
    try:
        path.unlink()
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.error(f"Failed to delete {reason} file {path}: {e}")
        return False
    logger.debug(f"Removed {reason} file: {path}")
    return True


# ============================================================================
# Permissions
# ============================================================================


def make_executable(path: Union[str, Path]) -> None:
    """
    Mark a file as executable (rwxr-xr-x).

    Must not be called for artifacts that are natively executable without a
    permission bit (Windows executables).

    Args:
        path: File to mark

    Raises:
        FileSystemError: If the mode cannot be changed
    """
    path = Path(path)
    try:
        os.chmod(path, EXECUTABLE_MODE)
    except OSError as e:
        raise FileSystemError(f"Failed to set {path} as executable: {e}") from e
    logger.info(f"Set {path} as executable")


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(member: str, destination: Path) -> None:
    """
    Refuse archive members that would land outside the destination.

    Raises:
        ExtractError: If the member path attempts directory traversal
    """
    member_path = (destination / member).resolve()
    if not member_path.is_relative_to(destination.resolve()):
        raise ExtractError(
            f"Archive member '{member}' attempts directory traversal, "
            "extraction has been blocked"
        )


def extract_zip(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
) -> None:
    """
    Extract every entry of a zip archive, overwriting existing files.

    All member paths are validated before anything is written.

    Args:
        archive_path: Path to the zip file
        destination: Directory to extract into (created if missing)

    Raises:
        ExtractError: If the archive is malformed or cannot be written out
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    try:
        destination.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(archive_path, "r") as zf:
            members = zf.namelist()
            for member in members:
                _validate_archive_path(member, destination)

            for member in members:
                zf.extract(member, destination)
    except ExtractError:
        raise
    except (
        zipfile.BadZipFile,
        zipfile.LargeZipFile,
        OSError,
        EOFError,
        RuntimeError,
    ) as e:
        raise ExtractError(f"Failed to extract zip file: {e}") from e
