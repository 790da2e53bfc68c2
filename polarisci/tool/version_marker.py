"""
Version marker for the installed CLI.

The marker is a zero-byte file whose modification time (in milliseconds)
equals the Last-Modified timestamp of the server artifact that is currently
expanded. Its content is never read.
"""

import logging
import os
from pathlib import Path
from typing import Union

from polarisci.core.exceptions import PersistenceError

logger = logging.getLogger(__name__)

VERSION_FILENAME = "polarisVersion.txt"
NS_PER_MS = 1_000_000


class VersionMarker:
    """
    Timestamp-bearing marker file.

    Attributes:
        path: Location of the marker file
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    @classmethod
    def in_directory(cls, install_directory: Union[str, Path]) -> "VersionMarker":
        return cls(Path(install_directory) / VERSION_FILENAME)

    def exists(self) -> bool:
        return self.path.is_file()

    def ensure_exists(self) -> None:
        """
        Create the marker at epoch 0 if it is missing.

        Raises:
            PersistenceError: If the marker cannot be created
        """
        if self.path.exists():
            return

        logger.info("The version file has not been created yet so creating it now.")
        try:
            self.path.touch(exist_ok=False)
            os.utime(self.path, ns=(0, 0))
        except OSError as e:
            raise PersistenceError(
                f"Failed to create the version file: {self.path}: {e}"
            ) from e

    def last_modified(self) -> int:
        """
        Stored timestamp in milliseconds since the epoch.

        Raises:
            PersistenceError: If the marker cannot be read
        """
        try:
            return self.path.stat().st_mtime_ns // NS_PER_MS
        except OSError as e:
            raise PersistenceError(f"Failed to read the version file: {self.path}: {e}") from e

    def update(self, timestamp_ms: int) -> None:
        """
        Record ``timestamp_ms`` as the installed version.

        Raises:
            PersistenceError: If the timestamp cannot be written
        """
        ns = timestamp_ms * NS_PER_MS
        try:
            os.utime(self.path, ns=(ns, ns))
        except (OSError, OverflowError) as e:
            raise PersistenceError(f"Failed to set last modified: {self.path}: {e}") from e
        logger.debug(f"Version marker set to {timestamp_ms}")
