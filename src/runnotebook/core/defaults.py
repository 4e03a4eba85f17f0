"""Defaulting and normalization of execution request fields.

Each function fills in one unset field or qualifies a short name into a
full identifier. Already-qualified values pass through unchanged, so
normalizing twice is the same as normalizing once.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass

from runnotebook.core.auth import ResolvedContext
from runnotebook.core.request import ExecutionRequest
from runnotebook.core.settings import Settings


@dataclass(frozen=True)
class NormalizedRequest:
    """
    Request fields after every default has been applied.

    Attributes:
        image_uri: Registry-qualified, tagged container image URI.
        role_arn: Full IAM role ARN the job runs as.
        output_prefix: S3 prefix that receives the job output.
        notebook: Notebook identifier used for naming.
    """

    image_uri: str
    role_arn: str
    output_prefix: str
    notebook: str


def normalize_image(
    image: str | None,
    ctx: ResolvedContext,
    default: str = "notebook-runner",
) -> str:
    """
    Qualify a container image reference.

    A bare name is placed in the caller's ECR registry and an untagged
    reference gets ':latest'.
    """
    if not image:
        image = default
    if "/" not in image:
        image = f"{ctx.account_id}.dkr.ecr.{ctx.region}.{ctx.domain_suffix}/{image}"
    if ":" not in image:
        image = image + ":latest"
    return image


def normalize_role(
    role: str | None,
    ctx: ResolvedContext,
    template: str = "BasicExecuteNotebookRole-{region}",
) -> str:
    """Qualify a role name into an IAM role ARN in the caller's account."""
    if not role:
        role = template.format(region=ctx.region)
    if "/" not in role:
        role = f"arn:{ctx.partition}:iam::{ctx.account_id}:role/{role}"
    return role


def default_output_prefix(input_path: str, output_prefix: str | None) -> str:
    """Return the output prefix, defaulting to the directory of the input."""
    if output_prefix is None:
        return posixpath.dirname(input_path)
    return output_prefix


def default_notebook(input_path: str, notebook: str | None) -> str:
    """Return the notebook identifier, defaulting to the input itself."""
    if notebook is None:
        return input_path
    return notebook


def normalize(
    request: ExecutionRequest,
    ctx: ResolvedContext,
    settings: Settings | None = None,
) -> NormalizedRequest:
    """
    Apply all defaults to a request.

    Args:
        request: The incoming execution request.
        ctx: Resolved account and region for this invocation.
        settings: Defaults to apply. Uses Settings() if None.

    Returns:
        A NormalizedRequest with every field resolved.
    """
    settings = settings or Settings()
    return NormalizedRequest(
        image_uri=normalize_image(request.image, ctx, settings.default_image),
        role_arn=normalize_role(request.role, ctx, settings.role_template),
        output_prefix=default_output_prefix(request.input_path, request.output_prefix),
        notebook=default_notebook(request.input_path, request.notebook),
    )
