"""
Polling of Polaris jobs.

A job moves through UNSCHEDULED, DISPATCHED, QUEUED and RUNNING until it
ends in COMPLETED, CANCELLED or FAILED. JobPoller re-fetches the job at a
fixed interval until it ends or the timeout elapses.
"""

import logging
import time
from typing import Callable, Optional

from polarisci.core.cancellation import CancellationToken
from polarisci.core.exceptions import (
    ConfigurationError,
    JobCancelledError,
    JobFailedError,
    JobTimeoutError,
)
from polarisci.service.client import ApiClient
from polarisci.service.models import JobState, JobStatus

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0


class JobPoller:
    """
    Waits for Polaris jobs to reach a terminal state.

    Args:
        client: API client used to fetch job resources
        poll_interval: Seconds between polls
        clock: Monotonic clock returning seconds
        cancellation: Token that interrupts the wait between polls
    """

    def __init__(
        self,
        client: ApiClient,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        cancellation: Optional[CancellationToken] = None,
    ):
        self.client = client
        self.poll_interval = poll_interval
        self.clock = clock
        self.cancellation = cancellation or CancellationToken()

    def get_job_status(self, job_url: str) -> JobStatus:
        """Fetch the current status of the job at ``job_url``."""
        return JobStatus.from_resource(self.client.get_json(job_url))

    def wait_for_terminal(self, job_url: str, timeout: float) -> JobStatus:
        """
        Poll the job until it completes.

        Args:
            job_url: Job status URL
            timeout: Maximum seconds to wait

        Returns:
            The final (COMPLETED) status

        Raises:
            ConfigurationError: If timeout is negative
            JobTimeoutError: If the job is still running when timeout elapses
            JobFailedError: If the job failed
            JobCancelledError: If the job was cancelled
            OperationCancelledError: If the wait itself was cancelled
        """
        if timeout < 0:
            raise ConfigurationError(f"Job timeout must not be negative, got {timeout}")

        started = self.clock()
        while True:
            self.cancellation.raise_if_cancelled()
            status = self.get_job_status(job_url)
            logger.debug(
                f"Job {job_url}: state={status.state.value if status.state else None} "
                f"progress={status.progress}"
            )

            if status.state is JobState.COMPLETED:
                logger.info(f"Job {job_url} completed")
                return status
            if status.state is JobState.FAILED:
                raise JobFailedError(job_url, status.failure_reason)
            if status.state is JobState.CANCELLED:
                raise JobCancelledError(job_url)

            elapsed = self.clock() - started
            if elapsed >= timeout:
                raise JobTimeoutError(
                    job_url, timeout, status.state.value if status.state else None
                )

            self.cancellation.sleep(min(self.poll_interval, timeout - elapsed))
