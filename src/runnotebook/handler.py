"""Invocation entry point for the RunNotebook function.

The function is invoked directly by clients and by schedule rules, which
pass the same event shape plus a ``rule_name``.
"""

from __future__ import annotations

from typing import Any, Mapping

import boto3

from runnotebook.core.adapters.sagemakerjobs import SageMakerJobsAdapter
from runnotebook.core.auth import ensure_session, resolve_context
from runnotebook.core.request import ExecutionRequest
from runnotebook.core.runs import execute_notebook
from runnotebook.core.settings import load_settings
from runnotebook.logging_utils import get_logger, setup_logging

logger = get_logger(__name__)


def run_notebook(
    event: Mapping[str, Any],
    session: boto3.session.Session | None = None,
) -> str:
    """
    Run the notebook described by an invocation event.

    Args:
        event: Invocation event (see ExecutionRequest.from_event).
        session: Optional boto3 session. A default session is created if None.

    Returns:
        The name of the created processing job.
    """
    settings = load_settings()
    request = ExecutionRequest.from_event(event, default_instance_type=settings.instance_type)
    logger.info(
        "Run request for %s%s",
        request.input_path,
        f" (rule {request.rule_name})" if request.rule_name else "",
    )
    session = ensure_session(session)
    ctx = resolve_context(session)
    adapter = SageMakerJobsAdapter.from_session(session)
    return execute_notebook(adapter, request, ctx, settings)


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, str]:
    """Entry point of the RunNotebook function; returns the created job name."""
    setup_logging()
    return {"job_name": run_notebook(event)}
