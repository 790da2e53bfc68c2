"""
Install command implementation.

Downloads the Polaris CLI when the server has a newer copy and prints the
path of the executable.
"""

import logging

from polarisci.config import load_config
from polarisci.core.download import create_session
from polarisci.core.locking import install_lock
from polarisci.core.platform import LocalTarget, OperatingSystemType, RemoteTarget
from polarisci.core.remote import SshChannel
from polarisci.tool.installer import ToolInstaller

logger = logging.getLogger(__name__)


def build_target(args):
    """Execution target selected by --remote-host/--remote-os."""
    if not args.remote_host:
        return LocalTarget()
    return RemoteTarget(
        SshChannel(args.remote_host), OperatingSystemType.from_name(args.remote_os)
    )


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    config = load_config(args.config)
    logger.debug(f"Installing Polaris CLI from {config.server_url} into {args.download_root}")

    with install_lock(args.download_root, timeout=args.lock_timeout):
        installer = ToolInstaller(
            config.server_url,
            args.download_root,
            session=create_session(config),
            target=build_target(args),
            timeout=config.timeout_seconds,
        )
        if args.home:
            print(installer.get_tool_home())
        else:
            print(installer.ensure_installed())

    return 0
