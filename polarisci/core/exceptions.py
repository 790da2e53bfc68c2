"""
Centralized exception hierarchy for polarisci.

Every error raised by the installer, the job poller and the issue count
aggregator derives from PolarisCiError so callers can catch the whole family
in one place.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class PolarisCiError(Exception):
    """Base exception for all polarisci errors."""

    pass


class OperationCancelledError(PolarisCiError):
    """Raised when an operation is cancelled through its CancellationToken."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigurationError(PolarisCiError):
    """Invalid configuration or on-disk state that must be fixed by an operator."""

    pass


class ConfigError(ConfigurationError):
    """Configuration file parsing or validation error."""

    pass


class InstallDirectoryEmptyError(ConfigurationError):
    """Raised when the install directory holds no expanded CLI."""

    def __init__(self, directory_name: str):
        self.directory_name = directory_name
        super().__init__(
            f"The {directory_name} directory is empty, "
            "so the Coverity on Polaris CLI can not be run."
        )


class InstallDirectoryCorruptedError(ConfigurationError):
    """Raised when the install directory holds more than one subdirectory."""

    def __init__(self, directory_name: str, subdirectories=None):
        self.directory_name = directory_name
        self.subdirectories = list(subdirectories or [])
        super().__init__(
            f"The {directory_name} directory should only be modified by polarisci. "
            "Please delete all files from that directory and try again."
        )


# ============================================================================
# Remote / Download Exceptions
# ============================================================================


class TransientRemoteError(PolarisCiError):
    """A single download candidate could not be fetched."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Could not fetch {url}: {reason}")


class RemoteExecutionError(PolarisCiError):
    """A query sent to a remote execution agent failed."""

    pass


class ApiError(PolarisCiError):
    """Raised when an API request fails or returns an unusable body."""

    def __init__(self, message: str, status_code=None):
        self.status_code = status_code
        super().__init__(message)


# ============================================================================
# Installation Exceptions
# ============================================================================


class ArchiveError(PolarisCiError):
    """Failed to expand a downloaded archive."""

    pass


class InsecureArchiveError(ArchiveError):
    """Archive member would be written outside the target directory."""

    pass


class PersistenceError(PolarisCiError):
    """The version marker could not be created or updated."""

    pass


class ToolNotFoundError(PolarisCiError):
    """The CLI executable could not be found after installation."""

    pass


# ============================================================================
# Missing Data Exceptions
# ============================================================================


class MissingDataError(PolarisCiError):
    """A required field is absent from remote or local data."""

    pass


class ArchitectureUndeterminedError(MissingDataError):
    """The architecture of the execution target could not be determined."""

    pass


class MalformedResultError(MissingDataError):
    """The scan result document could not be parsed."""

    pass


# ============================================================================
# Job Exceptions
# ============================================================================


class JobError(PolarisCiError):
    """Base exception for remote job outcomes other than completion."""

    def __init__(self, message: str, job_url: str):
        self.job_url = job_url
        super().__init__(message)


class JobTimeoutError(JobError):
    """The job did not reach a terminal state within the timeout."""

    def __init__(self, job_url: str, timeout: float, state=None):
        self.timeout = timeout
        self.state = state
        super().__init__(
            f"Job at {job_url} timed out after {timeout:g} seconds "
            f"(last state: {state or 'unknown'})",
            job_url,
        )


class JobFailedError(JobError):
    """The job finished in the FAILED state."""

    def __init__(self, job_url: str, reason=None):
        self.reason = reason
        message = f"Job at {job_url} failed"
        if reason:
            message += f": {reason}"
        super().__init__(message, job_url)


class JobCancelledError(JobError):
    """The job finished in the CANCELLED state."""

    def __init__(self, job_url: str):
        super().__init__(f"Job at {job_url} was cancelled", job_url)
