"""
Message passing to remote execution agents.

A remote agent is reached through a RemoteChannel: the caller sends a small,
self-contained query object and blocks until a typed reply arrives. The only
query the installer needs is the agent's CPU architecture.

Usage:
    from polarisci.core.remote import SshChannel, ArchitectureQuery

    channel = SshChannel("build-agent-07")
    arch = channel.act(ArchitectureQuery())   # e.g. 'arm64'
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from polarisci.core.exceptions import RemoteExecutionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArchitectureQuery:
    """Ask an agent for its machine architecture (lowercase, e.g. 'x86_64')."""

    command: Tuple[str, ...] = ("uname", "-m")

    def parse(self, output: str) -> str:
        lines = output.strip().splitlines()
        if not lines or not lines[0].strip():
            raise RemoteExecutionError("Empty architecture reply from remote agent")
        return lines[0].strip().lower()


class RemoteChannel(ABC):
    """Transport that runs a query on another machine and returns its reply."""

    @abstractmethod
    def act(self, query: ArchitectureQuery) -> str:
        """
        Run ``query`` on the remote agent.

        Raises:
            RemoteExecutionError: If the remote call fails
            OperationCancelledError: If the call was cancelled
        """


class SshChannel(RemoteChannel):
    """
    RemoteChannel that executes queries over ssh.

    Args:
        host: ssh destination (``host`` or ``user@host``)
        ssh_options: Extra options passed to ssh before the destination
        timeout: Seconds to wait for the remote command
    """

    def __init__(
        self,
        host: str,
        ssh_options: Optional[Sequence[str]] = None,
        timeout: int = 60,
    ):
        if not host:
            raise ValueError("ssh host cannot be empty")
        self.host = host
        self.ssh_options = list(ssh_options or ["-o", "BatchMode=yes"])
        self.timeout = timeout

    def build_command(self, query: ArchitectureQuery) -> List[str]:
        return ["ssh", *self.ssh_options, self.host, "--", *query.command]

    def act(self, query: ArchitectureQuery) -> str:
        cmd = self.build_command(query)
        logger.debug(f"Running remote query on {self.host}: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, timeout=self.timeout, check=True
            )
        except subprocess.TimeoutExpired as e:
            raise RemoteExecutionError(
                f"Remote query on {self.host} timed out after {self.timeout}s"
            ) from e
        except subprocess.CalledProcessError as e:
            raise RemoteExecutionError(
                f"Remote query on {self.host} failed with exit code {e.returncode}: "
                f"{(e.stderr or '').strip()}"
            ) from e
        except OSError as e:
            raise RemoteExecutionError(f"Could not start ssh: {e}") from e

        return query.parse(result.stdout)
