from __future__ import annotations

from typing import Any

import boto3
from botocore.client import BaseClient

from runnotebook.core.jobs import JobStatus, ProcessingJob
from runnotebook.core.payload import JobPayload
from runnotebook.logging_utils import get_logger

logger = get_logger(__name__)


class SageMakerJobsAdapter:
    """Adapter around the SageMaker Processing Jobs APIs."""

    _DEFAULT_PAGE_SIZE = 100

    def __init__(self, client: BaseClient):
        """Create a jobs adapter for a boto3 'sagemaker' client."""
        self.client = client

    @classmethod
    def from_session(cls, session: boto3.session.Session) -> SageMakerJobsAdapter:
        """Create an adapter from a boto3 session."""
        return cls(session.client("sagemaker"))

    def create_job(self, payload: JobPayload) -> str:
        """Create a processing job and return its ARN."""
        logger.debug("CreateProcessingJob %s", payload.job_name)
        response = self.client.create_processing_job(**payload.to_request())
        return response["ProcessingJobArn"]

    def describe_job(self, job_name: str) -> ProcessingJob:
        """Return the current state of a processing job."""
        logger.debug("DescribeProcessingJob %s", job_name)
        desc = self.client.describe_processing_job(ProcessingJobName=job_name)
        return ProcessingJob(
            name=desc["ProcessingJobName"],
            status=JobStatus.from_service(desc.get("ProcessingJobStatus")),
            arn=desc.get("ProcessingJobArn"),
            failure_reason=desc.get("FailureReason"),
            created=desc.get("CreationTime"),
        )

    def get_job_status(self, job_name: str) -> JobStatus:
        """Return the current status of a processing job."""
        return self.describe_job(job_name).status

    def stop_job(self, job_name: str) -> None:
        """Ask the service to stop a running processing job."""
        logger.debug("StopProcessingJob %s", job_name)
        self.client.stop_processing_job(ProcessingJobName=job_name)

    def list_jobs(
        self,
        name_contains: str | None = None,
        max_results: int | None = None,
    ) -> list[ProcessingJob]:
        """
        Return processing jobs, newest first.

        Args:
            name_contains: Only jobs whose name contains this substring.
            max_results: Stop after this many jobs. None lists all of them.
        """
        kwargs: dict[str, Any] = {
            "SortBy": "CreationTime",
            "SortOrder": "Descending",
            "MaxResults": self._DEFAULT_PAGE_SIZE,
        }
        if name_contains:
            kwargs["NameContains"] = name_contains

        jobs: list[ProcessingJob] = []
        while True:
            logger.debug("ListProcessingJobs %s", kwargs)
            page = self.client.list_processing_jobs(**kwargs)
            for summary in page.get("ProcessingJobSummaries", []):
                jobs.append(
                    ProcessingJob(
                        name=summary["ProcessingJobName"],
                        status=JobStatus.from_service(summary.get("ProcessingJobStatus")),
                        arn=summary.get("ProcessingJobArn"),
                        failure_reason=summary.get("FailureReason"),
                        created=summary.get("CreationTime"),
                    )
                )
                if max_results is not None and len(jobs) >= max_results:
                    return jobs
            token = page.get("NextToken")
            if not token:
                return jobs
            kwargs["NextToken"] = token
