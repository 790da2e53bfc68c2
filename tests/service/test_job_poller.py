"""
Unit tests for JobPoller and job status parsing.
"""

from unittest.mock import Mock

import pytest

from polarisci.core.cancellation import CancellationToken
from polarisci.core.exceptions import (
    ConfigurationError,
    JobCancelledError,
    JobFailedError,
    JobTimeoutError,
    OperationCancelledError,
)
from polarisci.service.jobs import JobPoller
from polarisci.service.models import JobState, JobStatus
from tests.utils.helpers import FakeClock

JOB_URL = "https://polaris.example.com/api/jobs/jobs/j1"


def _job(state, progress=None, failure=None):
    attributes = {"status": {"state": state, "progress": progress}}
    if failure is not None:
        attributes["failureInfo"] = {"userFriendlyFailureReason": failure}
    return {"data": {"id": "j1", "attributes": attributes}}


def _client(*payloads):
    client = Mock()
    client.get_json.side_effect = list(payloads)
    return client


class TestJobStatus:
    """Tests for JobStatus parsing."""

    def test_running(self):
        """Test state and progress are read from the resource."""
        status = JobStatus.from_resource(_job("RUNNING", progress=40))

        assert status.state is JobState.RUNNING
        assert status.progress == 40
        assert status.is_terminal is False

    def test_failure_reason(self):
        """Test the failure reason is captured."""
        status = JobStatus.from_resource(_job("FAILED", failure="Out of memory"))

        assert status.is_terminal is True
        assert status.failure_reason == "Out of memory"

    def test_unknown_state_not_terminal(self, caplog):
        """Test unknown states are treated as still running."""
        status = JobStatus.from_resource(_job("PAUSED"))

        assert status.state is None
        assert status.is_terminal is False
        assert "Unknown job state" in caplog.text

    def test_missing_status(self):
        """Test a resource without status parses."""
        assert JobStatus.from_resource({}).state is None

    @pytest.mark.parametrize("state", ["COMPLETED", "CANCELLED", "FAILED"])
    def test_terminal_states(self, state):
        """Test the terminal states."""
        assert JobState(state).is_terminal is True


class TestJobPoller:
    """Tests for JobPoller.wait_for_terminal."""

    def test_completes_after_progress(self):
        """Test polling continues until the job completes."""
        client = _client(
            _job("QUEUED"), _job("RUNNING", 10), _job("RUNNING", 90), _job("COMPLETED", 100)
        )
        poller = JobPoller(client, poll_interval=0, clock=FakeClock(step=1))

        status = poller.wait_for_terminal(JOB_URL, timeout=60)

        assert status.state is JobState.COMPLETED
        assert client.get_json.call_count == 4
        client.get_json.assert_called_with(JOB_URL)

    def test_already_complete(self):
        """Test a completed job needs one poll even with zero timeout."""
        client = _client(_job("COMPLETED"))
        poller = JobPoller(client, poll_interval=0, clock=FakeClock())

        assert poller.wait_for_terminal(JOB_URL, timeout=0).state is JobState.COMPLETED

    def test_failed(self):
        """Test a failed job raises JobFailedError."""
        client = _client(_job("RUNNING"), _job("FAILED", failure="Capture failed"))
        poller = JobPoller(client, poll_interval=0, clock=FakeClock())

        with pytest.raises(JobFailedError, match="failed") as exc_info:
            poller.wait_for_terminal(JOB_URL, timeout=60)

        assert exc_info.value.job_url == JOB_URL

    def test_cancelled(self):
        """Test a cancelled job raises JobCancelledError."""
        client = _client(_job("CANCELLED"))
        poller = JobPoller(client, poll_interval=0, clock=FakeClock())

        with pytest.raises(JobCancelledError, match="was cancelled"):
            poller.wait_for_terminal(JOB_URL, timeout=60)

    def test_timeout(self):
        """Test a job still running after the timeout raises JobTimeoutError."""
        client = Mock()
        client.get_json.return_value = _job("RUNNING", 50)
        poller = JobPoller(client, poll_interval=0, clock=FakeClock(step=10))

        with pytest.raises(JobTimeoutError, match="timed out"):
            poller.wait_for_terminal(JOB_URL, timeout=30)

        assert client.get_json.call_count == 3

    def test_zero_timeout_running(self):
        """Test zero timeout polls once and times out."""
        client = Mock()
        client.get_json.return_value = _job("RUNNING")
        poller = JobPoller(client, poll_interval=0, clock=FakeClock())

        with pytest.raises(JobTimeoutError):
            poller.wait_for_terminal(JOB_URL, timeout=0)

        assert client.get_json.call_count == 1

    def test_negative_timeout(self):
        """Test a negative timeout is rejected before polling."""
        client = Mock()
        poller = JobPoller(client, poll_interval=0, clock=FakeClock())

        with pytest.raises(ConfigurationError):
            poller.wait_for_terminal(JOB_URL, timeout=-1)

        client.get_json.assert_not_called()

    def test_sleep_capped_by_remaining_time(self):
        """Test the wait between polls never exceeds the remaining time."""
        client = Mock()
        client.get_json.return_value = _job("RUNNING")
        token = Mock(spec=CancellationToken)
        poller = JobPoller(
            client, poll_interval=100, clock=FakeClock(step=1), cancellation=token
        )

        with pytest.raises(JobTimeoutError):
            poller.wait_for_terminal(JOB_URL, timeout=3)

        for call in token.sleep.call_args_list:
            assert call[0][0] <= 3

    def test_cancelled_wait(self):
        """Test a cancelled token stops polling."""
        client = Mock()
        client.get_json.return_value = _job("RUNNING")
        token = CancellationToken()
        token.cancel()
        poller = JobPoller(client, poll_interval=0, clock=FakeClock(), cancellation=token)

        with pytest.raises(OperationCancelledError):
            poller.wait_for_terminal(JOB_URL, timeout=60)

        client.get_json.assert_not_called()
