import json
import logging

import pytest

from runnotebook import handler
from runnotebook.core.request import RequestError


class _StsStub:
    def get_caller_identity(self):
        return {"Account": "123456789012", "Arn": "arn:aws:iam::123456789012:user/alice"}


class _SessionStub:
    region_name = "us-east-1"

    def __init__(self, sagemaker):
        self.sagemaker = sagemaker

    def client(self, name):
        return {"sts": _StsStub(), "sagemaker": self.sagemaker}[name]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in (
        "AWS_DEFAULT_REGION",
        "RUN_NOTEBOOK_DEFAULT_IMAGE",
        "RUN_NOTEBOOK_DEFAULT_ROLE",
        "RUN_NOTEBOOK_INSTANCE_TYPE",
        "RUN_NOTEBOOK_VOLUME_SIZE_GB",
        "RUN_NOTEBOOK_MAX_RUNTIME_SECONDS",
    ):
        monkeypatch.delenv(key, raising=False)


def test_run_notebook_submits_scheduled_run(sagemaker_client, monkeypatch):
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    event = {
        "input_path": "s3://bucket/reports/nb.ipynb",
        "parameters": {"a": 1},
        "rule_name": "RunNotebook-nightly",
    }

    job_name = handler.run_notebook(event, session=_SessionStub(sagemaker_client))

    ((_, kwargs),) = sagemaker_client.calls
    assert job_name == kwargs["ProcessingJobName"]
    assert job_name.startswith("papermill-nb-")
    assert kwargs["RoleArn"] == "arn:aws:iam::123456789012:role/BasicExecuteNotebookRole-us-east-1"
    assert kwargs["ProcessingOutputConfig"]["Outputs"][0]["S3Output"]["S3Uri"] == "s3://bucket/reports"
    env = kwargs["Environment"]
    assert json.loads(env["PAPERMILL_PARAMS"]) == {"a": 1}
    assert env["AWS_EVENTBRIDGE_RULE"] == "RunNotebook-nightly"
    assert env["AWS_DEFAULT_REGION"] == "us-east-1"


def test_run_notebook_rejects_missing_input_path(sagemaker_client):
    with pytest.raises(RequestError):
        handler.run_notebook({}, session=_SessionStub(sagemaker_client))

    assert sagemaker_client.calls == []


def test_lambda_handler_returns_job_name(sagemaker_client, monkeypatch):
    monkeypatch.setattr(handler, "ensure_session", lambda session=None: _SessionStub(sagemaker_client))

    response = handler.lambda_handler({"input_path": "s3://bucket/nb.ipynb"}, None)

    assert set(response) == {"job_name"}
    assert response["job_name"].startswith("papermill-nb-")


def test_lambda_handler_keeps_runtime_log_handler(sagemaker_client, monkeypatch):
    root = logging.getLogger()
    runtime_handler = logging.NullHandler()
    monkeypatch.setattr(root, "handlers", [runtime_handler])
    monkeypatch.setattr(handler, "ensure_session", lambda session=None: _SessionStub(sagemaker_client))

    handler.lambda_handler({"input_path": "s3://bucket/nb.ipynb"}, None)

    assert root.handlers == [runtime_handler]
