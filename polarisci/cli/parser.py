"""
polarisci CLI argument parser.

This module implements the command-line interface for polarisci using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from polarisci import __version__
from polarisci.core.exceptions import PolarisCiError
from polarisci.core.locking import LockTimeout

logger = logging.getLogger(__name__)

DEFAULT_SCAN_RESULT = Path(".synopsys") / "polaris" / "cli-scan.json"
DEFAULT_JOB_TIMEOUT_MINUTES = 30


class CLI:
    """polarisci command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="polarisci",
            description="polarisci - Coverity on Polaris integration for CI pipelines",
            epilog='Use "polarisci COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"polarisci {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (environment variables override it)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_issue_count_command(subparsers)

        return parser

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Download the Polaris CLI if needed and print its path",
            description=(
                "Download the Coverity on Polaris CLI when the server has a newer "
                "version and print the absolute path of the executable"
            ),
        )
        parser.add_argument(
            "--download-root",
            type=Path,
            default=Path.cwd(),
            metavar="PATH",
            help="Directory that holds the CLI installation (default: current directory)",
        )
        parser.add_argument(
            "--remote-host",
            metavar="HOST",
            help="Install for a remote agent reached over ssh (architecture is probed there)",
        )
        parser.add_argument(
            "--remote-os",
            choices=["linux", "windows", "mac"],
            default="linux",
            metavar="OS",
            help="Operating system of the remote agent (linux|windows|mac) [default: linux]",
        )
        parser.add_argument(
            "--lock-timeout",
            type=float,
            default=300,
            metavar="SECONDS",
            help="Seconds to wait for another install on this node [default: 300]",
        )
        parser.add_argument(
            "--home",
            action="store_true",
            help="Print the CLI home directory instead of the executable",
        )

    def _add_issue_count_command(self, subparsers):
        """Add 'issue-count' subcommand."""
        parser = subparsers.add_parser(
            "issue-count",
            help="Print the issue count of the most recent analysis",
            description=(
                "Read cli-scan.json, wait for the analysis jobs if the CLI ran "
                "without -w, and print the total issue count"
            ),
        )
        parser.add_argument(
            "--scan-result",
            type=Path,
            default=DEFAULT_SCAN_RESULT,
            metavar="PATH",
            help=f"Path to cli-scan.json (default: {DEFAULT_SCAN_RESULT})",
        )
        parser.add_argument(
            "--job-timeout",
            type=int,
            default=DEFAULT_JOB_TIMEOUT_MINUTES,
            metavar="MINUTES",
            help=(
                "Minutes to wait for each analysis job when the CLI ran without -w "
                f"[default: {DEFAULT_JOB_TIMEOUT_MINUTES}]"
            ),
        )
        parser.add_argument(
            "--poll-interval",
            type=float,
            default=5.0,
            metavar="SECONDS",
            help="Seconds between job status checks [default: 5]",
        )
        parser.add_argument(
            "--fail-on-issues",
            action="store_true",
            help="Exit with code 2 when the issue count is greater than zero",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except (PolarisCiError, LockTimeout) as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "install": "polarisci.cli.commands.install",
            "issue-count": "polarisci.cli.commands.issue_count",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
