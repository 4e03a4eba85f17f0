"""Convention-based defaults for notebook jobs.

The values below are what a request falls back to when it leaves a field
unset. Each can be overridden through the environment of the invoking
function; the request itself can never change them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from runnotebook.logging_utils import get_logger

logger = get_logger(__name__)

DEFAULT_IMAGE_ENV = "RUN_NOTEBOOK_DEFAULT_IMAGE"
DEFAULT_ROLE_ENV = "RUN_NOTEBOOK_DEFAULT_ROLE"
INSTANCE_TYPE_ENV = "RUN_NOTEBOOK_INSTANCE_TYPE"
VOLUME_SIZE_ENV = "RUN_NOTEBOOK_VOLUME_SIZE_GB"
MAX_RUNTIME_ENV = "RUN_NOTEBOOK_MAX_RUNTIME_SECONDS"


@dataclass(frozen=True)
class Settings:
    """
    Defaults applied while building a job payload.

    Attributes:
        default_image: Image name used when the request names none.
        role_template: Role name used when the request names none; ``{region}``
                       is replaced by the resolved region.
        instance_type: Instance type used when the request names none.
        instance_count: Number of instances in the processing cluster.
        volume_size_gb: Size of the attached storage volume.
        max_runtime_seconds: Stopping condition for the job.
    """

    default_image: str = "notebook-runner"
    role_template: str = "BasicExecuteNotebookRole-{region}"
    instance_type: str = "ml.m5.large"
    instance_count: int = 1
    volume_size_gb: int = 40
    max_runtime_seconds: int = 7200


def _positive_int(environ: Mapping[str, str], key: str, default: int) -> int:
    """Return a positive integer from the environment, or the default."""
    raw = environ.get(key)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", key, raw)
        return default
    if value < 1:
        logger.warning("Ignoring %s=%r: must be >= 1", key, raw)
        return default
    return value


def _role_template(environ: Mapping[str, str], default: str) -> str:
    """Return the role template from the environment if it only uses {region}."""
    raw = environ.get(DEFAULT_ROLE_ENV)
    if not raw:
        return default
    try:
        raw.format(region="us-east-1")
    except (AttributeError, IndexError, KeyError, ValueError):
        logger.warning(
            "Ignoring %s=%r: only the {region} placeholder is supported", DEFAULT_ROLE_ENV, raw
        )
        return default
    return raw


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Build Settings from environment overrides.

    Args:
        environ: Mapping to read from. Defaults to os.environ.

    Returns:
        Settings with every unset or invalid override left at its default.
    """
    if environ is None:
        environ = os.environ
    base = Settings()
    return Settings(
        default_image=environ.get(DEFAULT_IMAGE_ENV) or base.default_image,
        role_template=_role_template(environ, base.role_template),
        instance_type=environ.get(INSTANCE_TYPE_ENV) or base.instance_type,
        instance_count=base.instance_count,
        volume_size_gb=_positive_int(environ, VOLUME_SIZE_ENV, base.volume_size_gb),
        max_runtime_seconds=_positive_int(
            environ, MAX_RUNTIME_ENV, base.max_runtime_seconds
        ),
    )
