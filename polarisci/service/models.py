"""
Data models for Polaris API resources and the CLI scan result document.

The CLI writes its result to ``.synopsys/polaris/cli-scan.json``. Only the
fields the build integration needs are modelled; unknown fields are ignored.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from polarisci.core.exceptions import MalformedResultError

logger = logging.getLogger(__name__)


class JobState(Enum):
    """States of a Polaris job."""

    UNSCHEDULED = "UNSCHEDULED"
    DISPATCHED = "DISPATCHED"
    QUEUED = "QUEUED"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"

    @classmethod
    def from_value(cls, value: Optional[str]) -> Optional["JobState"]:
        """Map an API state string to a JobState, None if unknown."""
        for state in cls:
            if state.value == value:
                return state
        return None

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.COMPLETED, JobState.CANCELLED, JobState.FAILED)


@dataclass
class JobStatus:
    """Status of a job as returned by the jobs API."""

    state: Optional[JobState]
    progress: Optional[int] = None
    failure_reason: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.state is not None and self.state.is_terminal

    @classmethod
    def from_resource(cls, payload: Dict[str, Any]) -> "JobStatus":
        """
        Build a JobStatus from a job resource document.

        Example payload:
            {"data": {"attributes": {"status": {"state": "RUNNING", "progress": 40}}}}
        """
        data = payload.get("data") or {}
        attributes = data.get("attributes") or {}
        status = attributes.get("status") or {}
        raw_state = status.get("state")
        state = JobState.from_value(raw_state)
        if raw_state is not None and state is None:
            logger.warning(f"Unknown job state {raw_state!r}, treating it as not finished")

        failure_info = attributes.get("failureInfo") or {}
        return cls(
            state=state,
            progress=status.get("progress"),
            failure_reason=failure_info.get("userFriendlyFailureReason")
            or failure_info.get("exceptionMessage"),
        )


@dataclass
class IssueSummary:
    """Inline issue summary, present when the CLI ran in blocking mode (-w)."""

    total_issue_count: int
    summary_url: Optional[str] = None


@dataclass
class ToolInfo:
    """One analysis tool run by the CLI."""

    tool_name: Optional[str]
    job_status_url: Optional[str] = None
    job_id: Optional[str] = None
    tool_version: Optional[str] = None


@dataclass
class ScanInfo:
    """Scan-level information from the result document."""

    issue_api_url: Optional[str] = None
    cli_version: Optional[str] = None
    scan_time: Optional[str] = None


@dataclass
class ScanResult:
    """Parsed cli-scan.json document."""

    scan_info: Optional[ScanInfo] = None
    issue_summary: Optional[IssueSummary] = None
    tools: List[ToolInfo] = field(default_factory=list)

    @classmethod
    def from_json(cls, raw: str) -> "ScanResult":
        """
        Parse a raw cli-scan.json document.

        Raises:
            MalformedResultError: If the document is not a JSON object or a url
                field is not a string
        """
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise MalformedResultError(f"Could not parse the CLI scan result: {e}") from e

        if not isinstance(data, dict):
            raise MalformedResultError("The CLI scan result must be a JSON object")

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScanResult":
        scan_info = None
        raw_scan_info = data.get("scanInfo")
        if isinstance(raw_scan_info, dict):
            scan_info = ScanInfo(
                issue_api_url=_optional_str(raw_scan_info, "issueApiUrl"),
                cli_version=raw_scan_info.get("cliVersion"),
                scan_time=raw_scan_info.get("scanTime"),
            )

        issue_summary = None
        raw_summary = data.get("issueSummary")
        if isinstance(raw_summary, dict) and raw_summary.get("total") is not None:
            try:
                total = int(raw_summary["total"])
            except (TypeError, ValueError) as e:
                raise MalformedResultError(
                    f"Invalid issue summary total: {raw_summary['total']!r}"
                ) from e
            issue_summary = IssueSummary(
                total_issue_count=total, summary_url=raw_summary.get("summaryUrl")
            )

        tools = [
            ToolInfo(
                tool_name=tool.get("toolName"),
                job_status_url=_optional_str(tool, "jobStatusUrl"),
                job_id=tool.get("jobId"),
                tool_version=tool.get("toolVersion"),
            )
            for tool in data.get("tools") or []
            if isinstance(tool, dict)
        ]

        return cls(scan_info=scan_info, issue_summary=issue_summary, tools=tools)


def _optional_str(mapping: Dict[str, Any], key: str) -> Optional[str]:
    value = mapping.get(key)
    if value is not None and not isinstance(value, str):
        raise MalformedResultError(f"'{key}' must be a string, got {value!r}")
    return value
