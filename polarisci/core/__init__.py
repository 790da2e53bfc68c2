"""
Core functionality for polarisci.

This package contains the foundational modules that other components depend on.
"""

from .cancellation import CancellationToken

from .exceptions import (
    PolarisCiError,
    OperationCancelledError,
    ConfigurationError,
    ConfigError,
    InstallDirectoryEmptyError,
    InstallDirectoryCorruptedError,
    TransientRemoteError,
    RemoteExecutionError,
    ApiError,
    ArchiveError,
    InsecureArchiveError,
    PersistenceError,
    ToolNotFoundError,
    MissingDataError,
    ArchitectureUndeterminedError,
    MalformedResultError,
    JobError,
    JobTimeoutError,
    JobFailedError,
    JobCancelledError,
)

from .platform import (
    OperatingSystemType,
    PlatformVariant,
    ExecutionTarget,
    LocalTarget,
    RemoteTarget,
    PlatformResolver,
)

__all__ = [
    "CancellationToken",
    "PolarisCiError",
    "OperationCancelledError",
    "ConfigurationError",
    "ConfigError",
    "InstallDirectoryEmptyError",
    "InstallDirectoryCorruptedError",
    "TransientRemoteError",
    "RemoteExecutionError",
    "ApiError",
    "ArchiveError",
    "InsecureArchiveError",
    "PersistenceError",
    "ToolNotFoundError",
    "MissingDataError",
    "ArchitectureUndeterminedError",
    "MalformedResultError",
    "JobError",
    "JobTimeoutError",
    "JobFailedError",
    "JobCancelledError",
    "OperatingSystemType",
    "PlatformVariant",
    "ExecutionTarget",
    "LocalTarget",
    "RemoteTarget",
    "PlatformResolver",
]
