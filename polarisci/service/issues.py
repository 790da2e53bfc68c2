"""
Total issue count for the most recent Polaris analysis.

When the CLI runs in blocking mode (-w) the count is written inline in
cli-scan.json. Otherwise the analysis jobs are still running on the server:
wait for each tool's job, then sum the issue-count resource.
"""

import logging
from pathlib import Path
from typing import Union

from polarisci.core.exceptions import ApiError, ConfigurationError, MissingDataError
from polarisci.service.client import ApiClient
from polarisci.service.jobs import JobPoller
from polarisci.service.models import ScanResult

logger = logging.getLogger(__name__)

STEP_EXCEPTION_PREFIX = "Issue count for most recent Polaris Analysis could not be determined: "


class IssueCountAggregator:
    """
    Computes the total issue count from a CLI scan result.

    Example:
        >>> aggregator = IssueCountAggregator(client, JobPoller(client))
        >>> aggregator.count_issues(Path("cli-scan.json").read_text(), job_timeout=1800)
        17
    """

    def __init__(self, client: ApiClient, poller: JobPoller):
        self.client = client
        self.poller = poller

    def count_issues(self, raw_result: str, job_timeout: float) -> int:
        """
        Determine the total issue count.

        Args:
            raw_result: Contents of cli-scan.json
            job_timeout: Seconds to wait for each job (only used without an
                inline issue summary)

        Raises:
            MalformedResultError: If the document cannot be parsed
            ConfigurationError: If job_timeout is negative and jobs must be awaited
            MissingDataError: If the issue API url or a job status url is missing
            JobError: If a job times out, fails or is cancelled
            ApiError: If the count resource cannot be fetched or holds a non-numeric value
        """
        result = ScanResult.from_json(raw_result)

        if result.issue_summary is not None:
            logger.debug(
                "Found total issue count in cli-scan.json, scan must have been run with -w"
            )
            return result.issue_summary.total_issue_count

        if job_timeout < 0:
            raise ConfigurationError(
                STEP_EXCEPTION_PREFIX
                + "Job timeout must be a positive number if the Polaris CLI is being run without -w"
            )

        issue_api_url = result.scan_info.issue_api_url if result.scan_info else None
        if not issue_api_url or not issue_api_url.strip():
            raise MissingDataError(
                "Cannot find the total issue count or issue api url in the cli-scan.json. "
                "Please ensure that you are using a supported version of the Polaris CLI."
            )

        logger.debug("Found issue api url, polling for job status")

        for tool in result.tools:
            if not tool.job_status_url:
                raise MissingDataError(
                    STEP_EXCEPTION_PREFIX + f"tool with name {tool.tool_name} has no jobStatusUrl"
                )
            self.poller.wait_for_terminal(tool.job_status_url, job_timeout)

        total = 0
        for item in self.client.iter_all(issue_api_url.strip()):
            value = ((item or {}).get("attributes") or {}).get("value")
            if value is None:
                continue
            try:
                total += int(value)
            except (TypeError, ValueError) as e:
                raise ApiError(
                    f"Invalid issue count value from {issue_api_url}: {value!r}"
                ) from e

        logger.info(f"Total issue count: {total}")
        return total

    def count_issues_from_file(self, path: Union[str, Path], job_timeout: float) -> int:
        """Read cli-scan.json from ``path`` and count its issues."""
        path = Path(path)
        try:
            raw_result = path.read_text(encoding="utf-8")
        except OSError as e:
            raise MissingDataError(f"Could not read the CLI scan result {path}: {e}") from e
        return self.count_issues(raw_result, job_timeout)
