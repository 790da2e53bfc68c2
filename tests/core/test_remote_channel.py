"""
Unit tests for the remote module.
"""

import subprocess
from unittest.mock import patch

import pytest

from polarisci.core.exceptions import RemoteExecutionError
from polarisci.core.remote import ArchitectureQuery, SshChannel


class TestArchitectureQuery:
    """Tests for ArchitectureQuery."""

    def test_parse_first_line(self):
        """Test the reply is trimmed and lowercased."""
        assert ArchitectureQuery().parse("  ARM64\nextra\n") == "arm64"

    def test_parse_empty_reply(self):
        """Test an empty reply is an error."""
        with pytest.raises(RemoteExecutionError):
            ArchitectureQuery().parse("\n")


class TestSshChannel:
    """Tests for SshChannel."""

    def test_empty_host_rejected(self):
        """Test a host is required."""
        with pytest.raises(ValueError):
            SshChannel("")

    def test_build_command(self):
        """Test the ssh command line."""
        channel = SshChannel("agent-07")
        assert channel.build_command(ArchitectureQuery()) == [
            "ssh",
            "-o",
            "BatchMode=yes",
            "agent-07",
            "--",
            "uname",
            "-m",
        ]

    def test_act_returns_architecture(self):
        """Test a successful query returns the parsed architecture."""
        completed = subprocess.CompletedProcess(args=[], returncode=0, stdout="x86_64\n", stderr="")
        with patch("polarisci.core.remote.subprocess.run", return_value=completed) as run:
            assert SshChannel("agent-07", timeout=5).act(ArchitectureQuery()) == "x86_64"

        assert run.call_args[1]["timeout"] == 5

    def test_act_nonzero_exit(self):
        """Test ssh failures raise RemoteExecutionError."""
        error = subprocess.CalledProcessError(255, ["ssh"], stderr="Permission denied")
        with patch("polarisci.core.remote.subprocess.run", side_effect=error):
            with pytest.raises(RemoteExecutionError, match="Permission denied"):
                SshChannel("agent-07").act(ArchitectureQuery())

    def test_act_timeout(self):
        """Test ssh timeouts raise RemoteExecutionError."""
        error = subprocess.TimeoutExpired(["ssh"], 5)
        with patch("polarisci.core.remote.subprocess.run", side_effect=error):
            with pytest.raises(RemoteExecutionError, match="timed out"):
                SshChannel("agent-07", timeout=5).act(ArchitectureQuery())

    def test_act_missing_ssh(self):
        """Test a missing ssh binary raises RemoteExecutionError."""
        with patch("polarisci.core.remote.subprocess.run", side_effect=FileNotFoundError("ssh")):
            with pytest.raises(RemoteExecutionError, match="Could not start ssh"):
                SshChannel("agent-07").act(ArchitectureQuery())
