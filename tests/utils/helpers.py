"""
Test helper functions and test doubles.

Provides utilities for building CLI archives, faking execution targets and
controlling time in polling tests.
"""

import io
import zipfile
from email.utils import formatdate
from pathlib import Path
from typing import Dict, Optional

from polarisci.core.platform import ExecutionTarget, OperatingSystemType

SERVER_URL = "https://polaris.example.com"
CLI_ROOT = "polaris_cli-2024.3.0"

DEFAULT_CLI_FILES = {
    "bin/polaris": b"#!/bin/sh\necho polaris\n",
    "bin/helper.sh": b"#!/bin/sh\n",
    "lib/polaris.jar": b"PK-not-really",
}


def build_cli_zip(root: str = CLI_ROOT, files: Optional[Dict[str, bytes]] = None) -> bytes:
    """
    Build an in-memory zip laid out like a published CLI archive.

    Args:
        root: Top-level directory name inside the archive
        files: Mapping of paths (relative to root) to contents

    Returns:
        Zip archive bytes
    """
    files = DEFAULT_CLI_FILES if files is None else files
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, content in files.items():
            zf.writestr(f"{root}/{name}", content)
    return buffer.getvalue()


def create_installed_cli(
    install_directory: Path,
    root: str = CLI_ROOT,
    files: Optional[Dict[str, bytes]] = None,
) -> Path:
    """Lay out an already-expanded CLI under ``install_directory``."""
    files = DEFAULT_CLI_FILES if files is None else files
    cli_root = install_directory / root
    for name, content in files.items():
        path = cli_root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    (cli_root / "bin").mkdir(parents=True, exist_ok=True)
    return cli_root


def http_date(epoch_seconds: int) -> str:
    """Format ``epoch_seconds`` as an HTTP Last-Modified value."""
    return formatdate(epoch_seconds, usegmt=True)


def download_url(name: str, suffix: str = "linux64") -> str:
    return f"{SERVER_URL}/api/tools/{name}_cli-{suffix}.zip"


class StaticTarget(ExecutionTarget):
    """Execution target with a fixed OS and architecture."""

    def __init__(self, os_type: OperatingSystemType, arch: Optional[str] = "x86_64"):
        self._os_type = os_type
        self._arch = arch
        self.architecture_calls = 0

    def os_type(self) -> OperatingSystemType:
        return self._os_type

    def architecture(self) -> Optional[str]:
        self.architecture_calls += 1
        return self._arch


class FakeClock:
    """Monotonic clock that advances by ``step`` seconds on every read."""

    def __init__(self, step: float = 1.0, start: float = 0.0):
        self.step = step
        self.now = start

    def __call__(self) -> float:
        current = self.now
        self.now += self.step
        return current
