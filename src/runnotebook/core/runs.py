"""Core notebook run execution and monitoring logic.

This module wires the request builder together: resolve defaults, derive
names, assemble the canonical payload, apply overrides and submit. The
building part is a pure function of its inputs; the only blocking call is
the final submission through the adapter. Monitoring helpers poll job
status for clients that want to wait for a run.
"""

from __future__ import annotations

import time
from datetime import datetime
from typing import Protocol

from runnotebook.core.auth import ResolvedContext
from runnotebook.core.defaults import normalize
from runnotebook.core.jobs import JobStatus, ProcessingJobsAdapter, submit_job
from runnotebook.core.merge import merge_overrides
from runnotebook.core.naming import derive_names
from runnotebook.core.payload import JobPayload, assemble_payload
from runnotebook.core.request import ExecutionRequest
from runnotebook.core.settings import Settings
from runnotebook.logging_utils import get_logger

logger = get_logger(__name__)


class JobStatusAdapter(Protocol):
    """Interface for querying job status."""

    def get_job_status(self, job_name: str) -> JobStatus:
        """Return the current status for a processing job."""
        ...


def build_canonical_payload(
    request: ExecutionRequest,
    ctx: ResolvedContext,
    settings: Settings | None = None,
    now: datetime | None = None,
) -> JobPayload:
    """
    Build the payload for a request before any override is applied.

    Args:
        request: The execution request.
        ctx: Resolved account and region.
        settings: Defaults to apply. Uses Settings() if None.
        now: Submission time used for naming. Defaults to the current time.

    Returns:
        The canonical JobPayload.
    """
    settings = settings or Settings()
    normalized = normalize(request, ctx, settings)
    names = derive_names(normalized.notebook, request.input_path, now)
    return assemble_payload(
        ctx,
        normalized,
        names,
        instance_type=request.instance_type,
        parameters=request.parameters,
        input_path=request.input_path,
        rule_name=request.rule_name,
        settings=settings,
    )


def build_job_payload(
    request: ExecutionRequest,
    ctx: ResolvedContext,
    settings: Settings | None = None,
    now: datetime | None = None,
) -> JobPayload:
    """Build the final payload for a request, overrides included."""
    payload = build_canonical_payload(request, ctx, settings, now)
    if request.extra_args is not None:
        payload = merge_overrides(payload, request.extra_args)
    return payload


def execute_notebook(
    adapter: ProcessingJobsAdapter,
    request: ExecutionRequest,
    ctx: ResolvedContext,
    settings: Settings | None = None,
    now: datetime | None = None,
) -> str:
    """
    Build the payload for a request and submit it once.

    Service errors propagate unchanged; nothing is retried.

    Returns:
        The name of the created processing job.
    """
    payload = build_job_payload(request, ctx, settings, now)
    logger.info(
        "Submitting %s (image=%s, instance=%s)",
        payload.job_name,
        payload.image_uri,
        payload.cluster_config.get("InstanceType"),
    )
    job_name = submit_job(adapter, payload)
    logger.info("Created processing job %s", job_name)
    return job_name


def wait_for_job(
    adapter: JobStatusAdapter,
    job_name: str,
    poll_interval: int = 10,
) -> JobStatus:
    """
    Block until a processing job reaches a terminal state.

    Args:
        adapter: Adapter used to query job status.
        job_name: Name of the processing job to monitor.
        poll_interval: Time in seconds to wait between status checks.

    Returns:
        The final JobStatus of the job.
    """
    if poll_interval < 0:
        raise ValueError("poll_interval must be >= 0")
    while True:
        status = adapter.get_job_status(job_name)
        if status.is_terminal:
            return status
        logger.debug("Job %s is %s", job_name, status.value)
        time.sleep(poll_interval)
