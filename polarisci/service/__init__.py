"""
Polaris API services: job polling and issue counting.
"""

from polarisci.service.client import ApiClient
from polarisci.service.issues import IssueCountAggregator
from polarisci.service.jobs import JobPoller
from polarisci.service.models import JobState, JobStatus, ScanResult

__all__ = [
    "ApiClient",
    "IssueCountAggregator",
    "JobPoller",
    "JobState",
    "JobStatus",
    "ScanResult",
]
