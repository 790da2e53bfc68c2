"""
Platform detection for the CLI installer.

The Coverity on Polaris CLI is published for four platform variants. This
module decides which one an execution target needs:

- Operating system detection (Windows, Linux, macOS)
- macOS architecture detection (Intel vs. Apple Silicon)
- Local targets read the running interpreter's platform directly
- Remote targets ask the agent through a RemoteChannel

Nothing here is cached: the install target may be a different agent on every
call.

Usage:
    from polarisci.core.platform import LocalTarget, PlatformResolver

    variant = PlatformResolver().resolve(LocalTarget())
    print(variant.url_suffix)   # e.g. 'linux64'
"""

import logging
import platform
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from polarisci.core.cancellation import CancellationToken
from polarisci.core.exceptions import (
    ArchitectureUndeterminedError,
    OperationCancelledError,
    RemoteExecutionError,
)
from polarisci.core.remote import ArchitectureQuery, RemoteChannel

logger = logging.getLogger(__name__)


class OperatingSystemType(Enum):
    """Operating system families the CLI is published for."""

    LINUX = "linux"
    WINDOWS = "windows"
    MAC = "mac"

    @classmethod
    def from_name(cls, name: str) -> "OperatingSystemType":
        """
        Map an OS name ('Linux', 'Darwin', 'Windows', 'mac', ...) to a type.

        Unknown names map to LINUX, matching the CLI's default download.
        """
        lowered = (name or "").strip().lower()
        if lowered.startswith("win"):
            return cls.WINDOWS
        if lowered in ("darwin", "mac", "macos", "macosx", "osx"):
            return cls.MAC
        return cls.LINUX


class PlatformVariant(Enum):
    """Download variants, valued by their URL suffix."""

    LINUX = "linux64"
    WINDOWS = "win64"
    MAC_INTEL = "macosx"
    MAC_ARM = "macos_arm"

    @property
    def url_suffix(self) -> str:
        return self.value

    @property
    def is_windows(self) -> bool:
        return self is PlatformVariant.WINDOWS


def detect_os_type() -> OperatingSystemType:
    """Detect the operating system of the running interpreter."""
    return OperatingSystemType.from_name(platform.system())


def is_arm_architecture(arch: str) -> bool:
    """Return True for ARM architecture strings ('arm64', 'aarch64', 'armv7l')."""
    arch = arch.lower()
    return arch.startswith("arm") or arch.startswith("aarch")


class ExecutionTarget(ABC):
    """The machine the CLI will be installed on and run from."""

    is_remote = False

    @abstractmethod
    def os_type(self) -> OperatingSystemType:
        """Operating system of the target."""

    @abstractmethod
    def architecture(self) -> Optional[str]:
        """Lowercase architecture string, or None if it could not be determined."""


class LocalTarget(ExecutionTarget):
    """The machine running this process."""

    def os_type(self) -> OperatingSystemType:
        return detect_os_type()

    def architecture(self) -> Optional[str]:
        machine = platform.machine()
        return machine.lower() if machine else None


class RemoteTarget(ExecutionTarget):
    """
    A remote agent reached through a RemoteChannel.

    The host knows the agent's operating system; the architecture is queried
    on demand. A failed or cancelled query yields None. A cancelled query
    re-marks ``cancellation`` so the caller still sees the cancellation.

    Args:
        channel: Transport to the agent
        os_type: Operating system reported by the host
        cancellation: Token of the operation driving this query
    """

    is_remote = True

    def __init__(
        self,
        channel: RemoteChannel,
        os_type: OperatingSystemType,
        cancellation: Optional[CancellationToken] = None,
    ):
        self.channel = channel
        self._os_type = os_type
        self.cancellation = cancellation

    def os_type(self) -> OperatingSystemType:
        return self._os_type

    def architecture(self) -> Optional[str]:
        try:
            return self.channel.act(ArchitectureQuery()).lower()
        except RemoteExecutionError as e:
            logger.error(
                "An exception occurred while fetching OS architecture information "
                f"for the agent node: {e}"
            )
        except OperationCancelledError as e:
            logger.error(f"Fetching OS architecture for the agent node was cancelled: {e}")
            if self.cancellation is not None:
                self.cancellation.cancel()
        return None


class PlatformResolver:
    """Resolves the PlatformVariant an execution target needs."""

    def resolve(self, target: ExecutionTarget) -> PlatformVariant:
        """
        Resolve the download variant for ``target``.

        Raises:
            ArchitectureUndeterminedError: If the target is macOS and its
                architecture cannot be determined
        """
        os_type = target.os_type()

        if os_type is OperatingSystemType.WINDOWS:
            return PlatformVariant.WINDOWS

        if os_type is OperatingSystemType.MAC:
            arch = target.architecture()
            if not arch:
                raise ArchitectureUndeterminedError(
                    "OS architecture of MAC could not be determined. 'arch' is missing."
                )
            logger.debug(f"Detected macOS architecture: {arch}")
            if is_arm_architecture(arch):
                return PlatformVariant.MAC_ARM
            return PlatformVariant.MAC_INTEL

        return PlatformVariant.LINUX
