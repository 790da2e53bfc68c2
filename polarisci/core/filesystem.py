"""
File system utilities for the CLI installation directory.

This module provides:
- Streaming archive expansion into a staging area with atomic-ish replacement
  of the previously expanded CLI
- Path validation against directory traversal
- Install directory inspection (expanded subdirectories)
- Executable permission fixing for the CLI bin directory

Hidden entries (names starting with '.') inside an install directory belong to
the expander's staging area and are never reported as expanded directories.
"""

import logging
import os
import shutil
import stat
import tempfile
import zipfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, List, Union

from polarisci.core.exceptions import ArchiveError, InsecureArchiveError

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"

STAGING_PREFIX = ".staging-"
CHUNK_SIZE = 1024 * 1024
EXECUTE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to parent.

    Args:
        path: Path to check
        parent: Potential parent path

    Returns:
        True if path is under parent (or equal to it)
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def verify_directory_writable(path: Path) -> bool:
    """
    Verify that a directory exists and is writable.

    Args:
        path: Directory path to verify.

    Returns:
        bool: True if directory exists and is writable, False otherwise.
    """
    if not path.exists() or not path.is_dir():
        return False

    # Unique per caller, so concurrent checks on one directory never collide
    try:
        with tempfile.TemporaryFile(prefix=".write_test-", dir=path):
            pass
        return True
    except OSError:
        return False


def list_subdirectories(directory: Union[str, Path]) -> List[Path]:
    """
    List the expanded (non-hidden) subdirectories of an install directory.

    Args:
        directory: Install directory

    Returns:
        Sorted list of subdirectory paths (empty if the directory is missing)
    """
    directory = Path(directory)
    if not directory.is_dir():
        return []

    return sorted(
        entry
        for entry in directory.iterdir()
        if entry.is_dir() and not entry.name.startswith(".")
    )


def safe_rmtree(path: Union[str, Path]) -> None:
    """
    Remove a directory tree, tolerating read-only files on Windows.

    Missing paths are ignored.
    """
    path = Path(path)
    if not path.exists():
        return

    if IS_WINDOWS:

        def handle_remove_readonly(func, target, exc):
            """Error handler for Windows read-only files."""
            os.chmod(target, stat.S_IWRITE)
            func(target)

        shutil.rmtree(path, onerror=handle_remove_readonly)
    else:
        shutil.rmtree(path)


def make_files_executable(directory: Union[str, Path]) -> int:
    """
    Add execute permission to every file directly inside ``directory``.

    Permission failures are logged and skipped; some platforms and file
    systems have no execute bit at all.

    Args:
        directory: Directory whose files should become executable

    Returns:
        Number of files whose permissions were set
    """
    directory = Path(directory)
    if not directory.is_dir():
        logger.debug(f"No bin directory to fix permissions in: {directory}")
        return 0

    updated = 0
    for entry in sorted(directory.iterdir()):
        if not entry.is_file():
            continue
        try:
            mode = entry.stat().st_mode
            if mode & EXECUTE_BITS != EXECUTE_BITS:
                os.chmod(entry, mode | EXECUTE_BITS)
            updated += 1
        except OSError as e:
            logger.warning(f"Could not make {entry} executable: {e}")

    return updated


# ============================================================================
# Archive Expansion
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Prevents directory traversal attacks (e.g., paths containing '../').

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    if os.path.isabs(path) or path.startswith(("/", "\\")):
        raise InsecureArchiveError(
            f"Archive member '{path}' uses an absolute path. "
            "This is a security risk and extraction has been blocked."
        )

    member_path = (destination / path).resolve()
    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


class ArchiveExpander(ABC):
    """Expands an archive stream into a target directory."""

    @abstractmethod
    def expand(self, stream: BinaryIO, target_dir: Path) -> None:
        """
        Expand ``stream`` into ``target_dir``.

        Implementations must leave the previous contents of ``target_dir``
        untouched when they raise.

        Raises:
            ArchiveError: If the archive is malformed or cannot be written
        """


class ZipArchiveExpander(ArchiveExpander):
    """
    Expands zip archives, replacing the previously expanded CLI directory.

    The stream is spooled to a temporary file (zip needs random access),
    validated and extracted into a hidden staging directory inside the target.
    Only after a clean extraction are the old expanded directories removed and
    the staged root moved into place. The archive must contain exactly one
    top-level directory so the install directory keeps its single-subdirectory
    shape.

    Example:
        >>> expander = ZipArchiveExpander()
        >>> with open('polaris_cli-linux64.zip', 'rb') as f:
        ...     expander.expand(f, Path('Polaris_CLI_Installation'))
    """

    def expand(self, stream: BinaryIO, target_dir: Path) -> None:
        target_dir = Path(target_dir)
        target_dir.mkdir(parents=True, exist_ok=True)
        self._remove_stale_staging(target_dir)

        staging = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=target_dir))
        logger.debug(f"Expanding archive into staging directory {staging}")

        try:
            with tempfile.TemporaryFile(prefix=STAGING_PREFIX, dir=target_dir) as spool:
                shutil.copyfileobj(stream, spool, CHUNK_SIZE)
                spool.seek(0)
                self._extract_zip(spool, staging)

            self._replace_expanded_directory(staging, target_dir)
        except ArchiveError:
            raise
        except Exception as e:
            raise ArchiveError(f"Failed to expand archive into {target_dir}: {e}") from e
        finally:
            safe_rmtree(staging)

    def _extract_zip(self, spool: BinaryIO, staging: Path) -> None:
        with zipfile.ZipFile(spool, "r") as zf:
            members = zf.namelist()
            if not members:
                raise ArchiveError("Archive is empty")

            # Validate all paths first
            for member in members:
                _validate_archive_path(member, staging)

            zf.extractall(staging)

    def _replace_expanded_directory(self, staging: Path, target_dir: Path) -> None:
        staged_roots = [entry for entry in staging.iterdir() if entry.is_dir()]
        if len(staged_roots) != 1:
            raise ArchiveError(
                "Archive must contain exactly one top-level directory, "
                f"found {len(staged_roots)}"
            )

        for previous in list_subdirectories(target_dir):
            logger.debug(f"Removing previously expanded directory {previous}")
            safe_rmtree(previous)

        new_root = staged_roots[0]
        os.replace(new_root, target_dir / new_root.name)
        logger.debug(f"Expanded archive to {target_dir / new_root.name}")

    def _remove_stale_staging(self, target_dir: Path) -> None:
        for entry in target_dir.iterdir():
            if entry.name.startswith(STAGING_PREFIX) and entry.is_dir():
                logger.debug(f"Removing stale staging directory {entry}")
                safe_rmtree(entry)
