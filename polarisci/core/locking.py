"""
Per-directory locking for callers of the installer.

ToolInstaller takes no lock of its own. Callers that may run several
pipeline jobs on the same node at once wrap each install in install_lock() so
extraction and version-marker updates never interleave.

Usage:
    from polarisci.core.locking import install_lock

    with install_lock(download_root, timeout=300):
        executable = installer.ensure_installed()
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Union

from filelock import FileLock, Timeout as LockTimeout

logger = logging.getLogger(__name__)

LOCK_FILENAME = ".polaris-cli-install.lock"


def lock_path_for(download_root: Union[str, Path]) -> Path:
    """Path of the lock file guarding the install directory under ``download_root``."""
    return Path(download_root) / LOCK_FILENAME


@contextmanager
def install_lock(download_root: Union[str, Path], timeout: float = 300):
    """
    Acquire the cross-process lock for the install directory.

    The lock file lives next to the install directory, never inside it.

    Args:
        download_root: Directory that holds the install directory
        timeout: Maximum wait time in seconds (default: 300 for long downloads)

    Yields:
        None

    Raises:
        LockTimeout: If lock can't be acquired within timeout
    """
    download_root = Path(download_root)
    download_root.mkdir(parents=True, exist_ok=True)
    lock_path = lock_path_for(download_root)
    lock = FileLock(str(lock_path), timeout=timeout)

    try:
        with lock:
            logger.debug(f"Acquired install lock: {lock_path}")
            yield
            logger.debug(f"Released install lock: {lock_path}")
    except LockTimeout as e:
        logger.error(
            f"Could not acquire install lock after {timeout}s. "
            "Another process may be installing the Polaris CLI."
        )
        raise LockTimeout(str(lock_path)) from e


__all__ = ["install_lock", "lock_path_for", "LockTimeout", "LOCK_FILENAME"]
