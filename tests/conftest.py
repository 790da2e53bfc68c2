"""
Pytest configuration and shared fixtures for polarisci tests.
"""

import json

import pytest

from polarisci.core.platform import OperatingSystemType
from tests.utils.helpers import StaticTarget, build_cli_zip


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def download_root(tmp_path):
    """Directory that will hold Polaris_CLI_Installation/."""
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def linux_target():
    """Linux x86_64 execution target."""
    return StaticTarget(OperatingSystemType.LINUX)


@pytest.fixture
def cli_zip() -> bytes:
    """Zip archive of a minimal CLI distribution."""
    return build_cli_zip()


@pytest.fixture
def blocking_scan_result() -> str:
    """cli-scan.json written by a CLI run with -w."""
    return json.dumps(
        {
            "version": "1.0.0",
            "scanInfo": {
                "cliVersion": "2024.3.0",
                "issueApiUrl": "https://polaris.example.com/api/query/v1/issues/counts",
            },
            "issueSummary": {
                "total": 42,
                "summaryUrl": "https://polaris.example.com/projects/p1",
            },
            "tools": [
                {
                    "toolName": "Coverity",
                    "jobStatusUrl": "https://polaris.example.com/api/jobs/jobs/j1",
                }
            ],
        }
    )


@pytest.fixture
def non_blocking_scan_result() -> str:
    """cli-scan.json written by a CLI run without -w."""
    return json.dumps(
        {
            "version": "1.0.0",
            "scanInfo": {
                "cliVersion": "2024.3.0",
                "issueApiUrl": "https://polaris.example.com/api/query/v1/issues/counts",
            },
            "tools": [
                {
                    "toolName": "Coverity",
                    "jobId": "j1",
                    "jobStatusUrl": "https://polaris.example.com/api/jobs/jobs/j1",
                },
                {
                    "toolName": "Sigma",
                    "jobId": "j2",
                    "jobStatusUrl": "https://polaris.example.com/api/jobs/jobs/j2",
                },
            ],
        }
    )
