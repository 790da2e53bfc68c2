"""
Issue count command implementation.

Prints the total issue count of the most recent Polaris analysis.
"""

import logging

from polarisci.config import load_config
from polarisci.core.download import create_session
from polarisci.service.client import ApiClient
from polarisci.service.issues import IssueCountAggregator
from polarisci.service.jobs import JobPoller

logger = logging.getLogger(__name__)

EXIT_ISSUES_FOUND = 2


def run(args) -> int:
    """
    Run the issue-count command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 2 with --fail-on-issues and issues found)
    """
    config = load_config(args.config)
    client = ApiClient(create_session(config), timeout=config.timeout_seconds)
    poller = JobPoller(client, poll_interval=args.poll_interval)
    aggregator = IssueCountAggregator(client, poller)

    count = aggregator.count_issues_from_file(args.scan_result, args.job_timeout * 60)
    print(count)

    if args.fail_on_issues and count > 0:
        logger.info(f"Found {count} issue(s)")
        return EXIT_ISSUES_FOUND
    return 0
