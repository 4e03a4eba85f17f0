import pytest

from runnotebook.core.jobs import JobStatus
from runnotebook.core.payload import JobPayload
from runnotebook.core.request import ExecutionRequest
from runnotebook.core import runs
from runnotebook.core.runs import execute_notebook, wait_for_job


class _CreateStub:
    def __init__(self, error: Exception | None = None):
        self.payloads: list[JobPayload] = []
        self.error = error

    def create_job(self, payload: JobPayload) -> str:
        self.payloads.append(payload)
        if self.error is not None:
            raise self.error
        return f"arn:aws:sagemaker:us-east-1:123456789012:processing-job/{payload.job_name}"


class _StatusStub:
    def __init__(self, statuses: list[JobStatus]):
        self.statuses = statuses
        self.calls = 0

    def get_job_status(self, job_name: str) -> JobStatus:
        status = self.statuses[self.calls]
        self.calls += 1
        return status


def test_execute_notebook_submits_once_and_returns_job_name(ctx, now):
    adapter = _CreateStub()
    request = ExecutionRequest(input_path="s3://bucket/nb.ipynb", parameters={"a": 1})

    job_name = execute_notebook(adapter, request, ctx, now=now)

    assert job_name == "papermill-nb-2024-01-02-03-04-05"
    assert len(adapter.payloads) == 1
    assert adapter.payloads[0].environment["PAPERMILL_PARAMS"] == '{"a": 1}'


def test_execute_notebook_propagates_service_errors(ctx, now):
    error = RuntimeError("ResourceLimitExceeded")
    adapter = _CreateStub(error=error)

    with pytest.raises(RuntimeError) as excinfo:
        execute_notebook(adapter, ExecutionRequest(input_path="s3://b/nb.ipynb"), ctx, now=now)

    assert excinfo.value is error
    assert len(adapter.payloads) == 1


def test_wait_for_job_returns_first_terminal_status(monkeypatch):
    monkeypatch.setattr(runs.time, "sleep", lambda _: None)
    adapter = _StatusStub(
        [JobStatus.IN_PROGRESS, JobStatus.STOPPING, JobStatus.STOPPED, JobStatus.COMPLETED]
    )

    assert wait_for_job(adapter, "job", poll_interval=1) == JobStatus.STOPPED
    assert adapter.calls == 3


def test_wait_for_job_rejects_negative_interval():
    with pytest.raises(ValueError, match="poll_interval"):
        wait_for_job(_StatusStub([]), "job", poll_interval=-1)
