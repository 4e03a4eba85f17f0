"""Identity and region resolution for AWS.

This module centralizes creation of a boto3 Session and derives the
partition, account and DNS suffix needed to build fully-qualified image
and role identifiers. Failures here are configuration problems of the
invoking environment and are raised immediately.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

import boto3
from botocore.exceptions import BotoCoreError, ClientError

REGION_ENV = "AWS_DEFAULT_REGION"


class IdentityError(RuntimeError):
    """Raised when the ambient AWS identity or region cannot be resolved."""


@dataclass(frozen=True)
class ResolvedContext:
    """
    Account and region facts for one invocation.

    Attributes:
        region: Region the session is bound to (e.g. 'us-east-1').
        partition: IAM partition of the caller (e.g. 'aws', 'aws-cn').
        account_id: Twelve-digit account id of the caller.
        domain_suffix: DNS suffix for the region's partition.
        invoking_region: Value of AWS_DEFAULT_REGION in the invoking
                         environment, or None when it is not set.
    """

    region: str
    partition: str
    account_id: str
    domain_suffix: str
    invoking_region: str | None = None


def ensure_session(session: boto3.session.Session | None = None) -> boto3.session.Session:
    """If session is None, create a default session and return it. Otherwise return the session passed in."""
    if session is None:
        session = boto3.session.Session()
    return session


def domain_for_region(region: str) -> str:
    """
    Get the DNS suffix for the given region.

    Args:
        region: AWS region name.

    Returns:
        The DNS suffix of the region's partition.
    """
    if region.startswith("us-iso-"):
        return "c2s.ic.gov"
    if region.startswith("us-isob-"):
        return "sc2s.sgov.gov"
    if region.startswith("cn-"):
        return "amazonaws.com.cn"
    return "amazonaws.com"


def _partition_from_arn(arn: str) -> str:
    """Return the partition field of an ARN ('arn:<partition>:...')."""
    parts = arn.split(":")
    if len(parts) < 2 or parts[0] != "arn" or not parts[1]:
        raise IdentityError(f"Unexpected caller identity ARN: {arn!r}")
    return parts[1]


def resolve_context(
    session: boto3.session.Session | None = None,
    environ: Mapping[str, str] | None = None,
) -> ResolvedContext:
    """
    Resolve region, partition and account for the current caller.

    The region comes from the session configuration; partition and account
    come from a single sts:GetCallerIdentity call.

    Args:
        session: Optional boto3 session. A default session is created if None.
        environ: Environment of the invoking process. Defaults to os.environ.

    Returns:
        A ResolvedContext for this invocation.

    Raises:
        IdentityError: If no region is configured or the identity lookup fails.
    """
    session = ensure_session(session)
    if environ is None:
        environ = os.environ

    region = session.region_name
    if not region:
        raise IdentityError(
            "No AWS region configured. Set AWS_DEFAULT_REGION or configure a profile region."
        )

    try:
        identity = session.client("sts").get_caller_identity()
    except (BotoCoreError, ClientError) as exc:
        raise IdentityError(f"Unable to resolve AWS caller identity: {exc}") from exc

    return ResolvedContext(
        region=region,
        partition=_partition_from_arn(identity["Arn"]),
        account_id=identity["Account"],
        domain_suffix=domain_for_region(region),
        invoking_region=environ.get(REGION_ENV),
    )
