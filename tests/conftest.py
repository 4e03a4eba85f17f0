from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from runnotebook.core.auth import ResolvedContext  # noqa: E402


@pytest.fixture
def ctx() -> ResolvedContext:
    return ResolvedContext(
        region="us-east-1",
        partition="aws",
        account_id="123456789012",
        domain_suffix="amazonaws.com",
    )


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


class FakeSageMakerClient:
    """Records calls made through a boto3 'sagemaker' client."""

    def __init__(self, pages=None, describe=None, error=None):
        self.calls: list[tuple[str, dict]] = []
        self.pages = list(pages or [])
        self.describe = describe or {}
        self.error = error

    def create_processing_job(self, **kwargs):
        self.calls.append(("create_processing_job", kwargs))
        if self.error is not None:
            raise self.error
        name = kwargs["ProcessingJobName"]
        return {
            "ProcessingJobArn": f"arn:aws:sagemaker:us-east-1:123456789012:processing-job/{name}"
        }

    def describe_processing_job(self, **kwargs):
        self.calls.append(("describe_processing_job", kwargs))
        return self.describe

    def stop_processing_job(self, **kwargs):
        self.calls.append(("stop_processing_job", kwargs))
        return {}

    def list_processing_jobs(self, **kwargs):
        self.calls.append(("list_processing_jobs", dict(kwargs)))
        return self.pages.pop(0)


@pytest.fixture
def sagemaker_client() -> FakeSageMakerClient:
    return FakeSageMakerClient()


@pytest.fixture
def fake_sagemaker() -> type[FakeSageMakerClient]:
    return FakeSageMakerClient
