"""
Coverity on Polaris CLI installer.

This module keeps an executable copy of the CLI on disk, downloading it from
the Polaris server only when the server's artifact differs from the one last
installed:

1. Check the install directory shape
2. Ensure the version marker exists
3. Resolve the platform variant of the execution target
4. GET each candidate download name until one answers without an error
5. Expand the archive when its Last-Modified differs from the marker
6. Locate the single expanded directory and its bin/ folder
7. Make bin/ files executable
8. Resolve the CLI executable

The installer is not synchronized. Callers that may run concurrently against
the same install directory serialize with polarisci.core.locking.install_lock.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import requests

from polarisci.core.download import (
    DEFAULT_TIMEOUT,
    create_session,
    is_error_status,
    last_modified_millis,
    open_stream,
)
from polarisci.core.exceptions import (
    ConfigurationError,
    InstallDirectoryCorruptedError,
    InstallDirectoryEmptyError,
    ToolNotFoundError,
    TransientRemoteError,
)
from polarisci.core.filesystem import (
    ArchiveExpander,
    ZipArchiveExpander,
    list_subdirectories,
    make_files_executable,
    verify_directory_writable,
)
from polarisci.core.platform import (
    ExecutionTarget,
    LocalTarget,
    PlatformResolver,
    PlatformVariant,
)
from polarisci.tool.version_marker import VersionMarker

logger = logging.getLogger(__name__)

INSTALL_DIRECTORY_NAME = "Polaris_CLI_Installation"
DOWNLOAD_PATH_FORMAT = "/api/tools/%s_cli-{suffix}.zip"

# Names the archive is published under, in the order they are tried.
DOWNLOAD_CANDIDATES = ("swip", "polaris")

# Executable names inside bin/, in the order they are tried.
EXECUTABLE_CANDIDATES = ("polaris", "swip_cli")


class ToolInstaller:
    """
    Downloads, expands and resolves the Polaris CLI.

    Example:
        >>> installer = ToolInstaller("https://polaris.example.com", Path("/opt/ci"))
        >>> executable = installer.ensure_installed()
        >>> print(executable)
        /opt/ci/Polaris_CLI_Installation/polaris_cli-1.2.3/bin/polaris
    """

    def __init__(
        self,
        server_url: Optional[str],
        download_root: Union[str, Path],
        session: Optional[requests.Session] = None,
        expander: Optional[ArchiveExpander] = None,
        target: Optional[ExecutionTarget] = None,
        resolver: Optional[PlatformResolver] = None,
        marker: Optional[VersionMarker] = None,
        timeout: int = DEFAULT_TIMEOUT,
        download_candidates: Sequence[str] = DOWNLOAD_CANDIDATES,
        executable_candidates: Sequence[str] = EXECUTABLE_CANDIDATES,
    ):
        """
        Initialize the installer.

        Args:
            server_url: Polaris server base URL
            download_root: Directory that will hold Polaris_CLI_Installation/
            session: HTTP session (default: unauthenticated session)
            expander: Archive expander (default: ZipArchiveExpander)
            target: Execution target the CLI is installed for (default: local)
            resolver: Platform resolver
            marker: Version marker (default: polarisVersion.txt in install dir)
            timeout: HTTP timeout in seconds for download requests
            download_candidates: Tool names tried when downloading
            executable_candidates: Executable names tried inside bin/

        Raises:
            ConfigurationError: If the server URL is missing or the install
                directory cannot be created or written
        """
        if server_url is None or not str(server_url).strip():
            raise ConfigurationError("A Polaris server url must be provided.")

        self.server_url = str(server_url).strip().rstrip("/")
        self.install_directory = Path(download_root) / INSTALL_DIRECTORY_NAME

        try:
            self.install_directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(
                f"Failed to create the install directory: {self.install_directory.absolute()}"
            ) from e

        if not verify_directory_writable(self.install_directory):
            raise ConfigurationError("The provided directory must exist and be writable.")

        self.session = session or create_session()
        self.expander = expander or ZipArchiveExpander()
        self.target = target or LocalTarget()
        self.resolver = resolver or PlatformResolver()
        self.marker = marker or VersionMarker.in_directory(self.install_directory)
        self.timeout = timeout
        self.download_candidates = tuple(download_candidates)
        self.executable_candidates = tuple(executable_candidates)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def ensure_installed(self) -> str:
        """
        Make sure the CLI is installed and return the executable's absolute path.

        Raises:
            ConfigurationError: Install directory empty or corrupted
            PersistenceError: Version marker cannot be created or updated
            ArchitectureUndeterminedError: macOS architecture unknown
            ArchiveError: Downloaded archive could not be expanded
            ToolNotFoundError: No usable executable in bin/
        """
        bin_directory, variant = self._install()
        executable = self._resolve_executable(bin_directory, variant)
        path = str(executable.resolve())
        logger.info(f"Coverity on Polaris CLI downloaded/found successfully: {path}")
        return path

    def get_bin_directory(self) -> Path:
        """Install (or reuse) the CLI and return its bin directory."""
        bin_directory, _ = self._install()
        return bin_directory

    def get_tool_home(self) -> str:
        """Install (or reuse) the CLI and return its expanded root directory."""
        return str(self.get_bin_directory().parent.resolve())

    def get_download_url_format(self, variant: PlatformVariant) -> str:
        """
        URL template for ``variant`` with one '%s' placeholder for the tool name.

        Example:
            >>> installer.get_download_url_format(PlatformVariant.LINUX)
            'https://polaris.example.com/api/tools/%s_cli-linux64.zip'
        """
        return self.server_url + DOWNLOAD_PATH_FORMAT.format(suffix=variant.url_suffix)

    def _install(self) -> Tuple[Path, PlatformVariant]:
        self._check_directory_shape()
        self.marker.ensure_exists()

        variant = self.resolver.resolve(self.target)
        logger.debug(f"Resolved platform variant: {variant.url_suffix}")
        self._download_if_modified(self.get_download_url_format(variant))

        bin_directory = self._find_expanded_directory() / "bin"
        make_files_executable(bin_directory)
        return bin_directory, variant

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------

    def _download_if_modified(self, url_format: str) -> bool:
        """
        Fetch the first available candidate and expand it if it changed.

        Returns:
            True if a new archive was expanded
        """
        last_downloaded = self.marker.last_modified()
        logger.debug(f"last time downloaded: {last_downloaded}")

        for name in self.download_candidates:
            try:
                response = self._fetch_candidate(url_format % name)
            except TransientRemoteError as e:
                logger.warning(str(e))
                continue

            with response:
                return self._expand_if_modified(response, last_downloaded)

        logger.warning(
            "The Coverity on Polaris CLI could not be fetched from the server; "
            "using the existing installation if there is one."
        )
        return False

    def _fetch_candidate(self, url: str) -> requests.Response:
        """
        Open a streamed GET for one candidate.

        Raises:
            TransientRemoteError: If the request fails or the server answers
                with an error status
        """
        try:
            response = open_stream(self.session, url, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransientRemoteError(url, str(e)) from e

        if is_error_status(response.status_code):
            response.close()
            raise TransientRemoteError(url, f"HTTP {response.status_code}")
        return response

    def _expand_if_modified(self, response: requests.Response, last_downloaded: int) -> bool:
        server_modified = last_modified_millis(response)

        if server_modified is not None and server_modified == last_downloaded:
            logger.debug(
                "The Coverity on Polaris CLI has not been modified since it was "
                "last downloaded - skipping download."
            )
            return False

        logger.info("Downloading the Coverity on Polaris CLI.")
        self.expander.expand(response.raw, self.install_directory)

        # No Last-Modified: keep the marker at epoch 0 so the next run fetches again.
        self.marker.update(server_modified if server_modified is not None else 0)
        logger.info("Coverity on Polaris CLI downloaded successfully.")
        return True

    # ------------------------------------------------------------------
    # Install directory
    # ------------------------------------------------------------------

    def _check_directory_shape(self) -> None:
        directories = list_subdirectories(self.install_directory)
        if len(directories) > 1:
            raise InstallDirectoryCorruptedError(INSTALL_DIRECTORY_NAME, directories)

    def _find_expanded_directory(self) -> Path:
        # Only one directory is allowed in the install directory, so it IS the expanded archive.
        directories = list_subdirectories(self.install_directory)
        if not directories:
            raise InstallDirectoryEmptyError(INSTALL_DIRECTORY_NAME)
        if len(directories) > 1:
            raise InstallDirectoryCorruptedError(INSTALL_DIRECTORY_NAME, directories)
        return directories[0]

    def _resolve_executable(self, bin_directory: Path, variant: PlatformVariant) -> Path:
        for name in self.executable_candidates:
            filename = name + ".exe" if variant.is_windows else name
            candidate = bin_directory / filename
            if candidate.is_file() and candidate.stat().st_size > 0:
                return candidate

        raise ToolNotFoundError(
            "The Coverity on Polaris CLI does not appear to have been downloaded "
            "correctly - be sure to download it first."
        )
