"""
Polaris CLI installation.
"""

from polarisci.tool.installer import (
    ToolInstaller,
    INSTALL_DIRECTORY_NAME,
    DOWNLOAD_CANDIDATES,
    EXECUTABLE_CANDIDATES,
)
from polarisci.tool.version_marker import VersionMarker, VERSION_FILENAME

__all__ = [
    "ToolInstaller",
    "VersionMarker",
    "INSTALL_DIRECTORY_NAME",
    "DOWNLOAD_CANDIDATES",
    "EXECUTABLE_CANDIDATES",
    "VERSION_FILENAME",
]
