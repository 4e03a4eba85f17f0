"""Job name and container path derivation.

Job names are built from the notebook's file name and a UTC timestamp with
one-second resolution. Two submissions of the same notebook within the same
second produce the same name; the service rejects the second one.
"""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass
from datetime import datetime, timezone

JOB_NAME_PREFIX = "papermill-"
MAX_JOB_NAME_LENGTH = 63
TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M-%S"

CONTAINER_INPUT_DIR = "/opt/ml/processing/input/"
CONTAINER_OUTPUT_DIR = "/opt/ml/processing/output/"

_INVALID_NAME_CHARS = re.compile(r"[^-a-zA-Z0-9]")


@dataclass(frozen=True)
class DerivedNames:
    """
    Names and paths derived for one job.

    Attributes:
        timestamp: UTC timestamp, 'YYYY-MM-DD-HH-MM-SS'.
        job_name: Processing job name (at most 63 characters).
        notebook_name: Base file name of the notebook.
        output_filename: File name of the executed notebook.
        container_input_path: Path of the input file inside the container.
        container_output_path: Path the executed notebook is written to.
    """

    timestamp: str
    job_name: str
    notebook_name: str
    output_filename: str
    container_input_path: str
    container_output_path: str


def format_timestamp(now: datetime | None = None) -> str:
    """Return `now` (default: current time) as a fixed-width UTC timestamp."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime(TIMESTAMP_FORMAT)


def sanitize_stem(stem: str) -> str:
    """Replace every character outside [A-Za-z0-9-] with '-'."""
    return _INVALID_NAME_CHARS.sub("-", stem)


def make_job_name(stem: str, timestamp: str) -> str:
    """
    Build a processing job name from a notebook stem.

    The prefixed, sanitized stem is truncated so that '-' plus the
    timestamp always fits within MAX_JOB_NAME_LENGTH.
    """
    head = (JOB_NAME_PREFIX + sanitize_stem(stem))[: MAX_JOB_NAME_LENGTH - 1 - len(timestamp)]
    return f"{head}-{timestamp}"


def derive_names(
    notebook: str,
    input_path: str,
    now: datetime | None = None,
) -> DerivedNames:
    """
    Derive the job name, output file name and container paths.

    Args:
        notebook: Notebook identifier (URI or path); only its base name is used.
        input_path: URI of the input artifact mounted into the container.
        now: Time of submission. Defaults to the current time.

    Returns:
        A DerivedNames instance.
    """
    timestamp = format_timestamp(now)
    notebook_name = posixpath.basename(notebook)
    stem, ext = posixpath.splitext(notebook_name)
    output_filename = f"{stem}-{timestamp}{ext}"
    return DerivedNames(
        timestamp=timestamp,
        job_name=make_job_name(stem, timestamp),
        notebook_name=notebook_name,
        output_filename=output_filename,
        container_input_path=CONTAINER_INPUT_DIR + posixpath.basename(input_path),
        container_output_path=CONTAINER_OUTPUT_DIR + output_filename,
    )
