"""Core job domain models plus submission and lookup logic.

This module defines the processing job data structures (ProcessingJob,
JobStatus) and the domain-level operations for submitting and finding
notebook jobs. It is free of boto3 specifics; the service is reached
through an adapter so the same logic serves the invocation handler,
client tooling and tests.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from runnotebook.core.payload import JobPayload


class JobStatus(str, Enum):
    """
    Enumeration of processing job states.

    Values mirror ProcessingJobStatus; UNKNOWN covers anything else.
    """

    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    FAILED = "Failed"
    STOPPING = "Stopping"
    STOPPED = "Stopped"
    UNKNOWN = "Unknown"

    @classmethod
    def from_service(cls, value: str | None) -> JobStatus:
        """Map a ProcessingJobStatus string to a JobStatus."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        """True if the job can no longer change state."""
        return self in {JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.STOPPED}


@dataclass(frozen=True)
class ProcessingJob:
    """
    Represents a processing job that runs a notebook.

    Attributes:
        name: Processing job name.
        status: Current status of the job.
        arn: Processing job ARN, when known.
        failure_reason: Reason reported by the service for a failed job.
        created: Creation time reported by the service.
    """

    name: str
    status: JobStatus = JobStatus.UNKNOWN
    arn: str | None = None
    failure_reason: str | None = None
    created: datetime | None = None


class ProcessingJobsAdapter(Protocol):
    """Interface for creating processing jobs."""

    def create_job(self, payload: JobPayload) -> str:
        """Create the job and return its ARN."""
        ...


class JobListingAdapter(Protocol):
    """Interface for listing processing jobs."""

    def list_jobs(self, name_contains: str | None = None) -> list[ProcessingJob]:
        """Return jobs visible to the current principal."""
        ...


def job_name_from_arn(arn: str) -> str:
    """Return the trailing path segment of a processing job ARN."""
    return re.sub(r"^.*/", "", arn)


def submit_job(adapter: ProcessingJobsAdapter, payload: JobPayload) -> str:
    """
    Submit a payload and return the service-assigned job name.

    Errors raised by the adapter propagate unchanged.

    Args:
        adapter: Adapter used to create the job.
        payload: Fully assembled job payload.

    Returns:
        The job name taken from the returned ARN.
    """
    return job_name_from_arn(adapter.create_job(payload))


def find_jobs(
    adapter: JobListingAdapter,
    pattern: str,
    name_contains: str | None = None,
) -> list[ProcessingJob]:
    """
    Find jobs whose names match a regular expression.

    Args:
        adapter: Adapter used to list jobs.
        pattern: Regular expression applied to job names.
        name_contains: Optional substring filter applied by the service first.

    Returns:
        Matching jobs, in the order the adapter listed them.
    """
    try:
        regex = re.compile(pattern)
    except re.error as exc:
        raise ValueError(f"Invalid regex expression: {exc}") from exc
    return [job for job in adapter.list_jobs(name_contains) if regex.search(job.name)]
