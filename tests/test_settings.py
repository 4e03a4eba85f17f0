import pytest

from runnotebook.core.defaults import normalize_role
from runnotebook.core.settings import Settings, load_settings


def test_load_settings_defaults():
    assert load_settings({}) == Settings()


def test_load_settings_reads_overrides():
    settings = load_settings(
        {
            "RUN_NOTEBOOK_DEFAULT_IMAGE": "runner:2",
            "RUN_NOTEBOOK_DEFAULT_ROLE": "NotebookRole-{region}",
            "RUN_NOTEBOOK_INSTANCE_TYPE": "ml.t3.medium",
            "RUN_NOTEBOOK_VOLUME_SIZE_GB": "100",
            "RUN_NOTEBOOK_MAX_RUNTIME_SECONDS": "600",
        }
    )

    assert settings.default_image == "runner:2"
    assert settings.role_template == "NotebookRole-{region}"
    assert settings.instance_type == "ml.t3.medium"
    assert settings.volume_size_gb == 100
    assert settings.max_runtime_seconds == 600


def test_load_settings_ignores_invalid_integers():
    settings = load_settings(
        {"RUN_NOTEBOOK_VOLUME_SIZE_GB": "lots", "RUN_NOTEBOOK_MAX_RUNTIME_SECONDS": "0"}
    )

    assert settings.volume_size_gb == 40
    assert settings.max_runtime_seconds == 7200


@pytest.mark.parametrize(
    "template", ["Role-{account}", "Role-{0}", "Role-{region", "Role-}", "Role-{region.upper}"]
)
def test_load_settings_ignores_unusable_role_template(template, ctx):
    settings = load_settings({"RUN_NOTEBOOK_DEFAULT_ROLE": template})

    assert settings.role_template == "BasicExecuteNotebookRole-{region}"
    assert normalize_role(None, ctx, settings.role_template) == (
        "arn:aws:iam::123456789012:role/BasicExecuteNotebookRole-us-east-1"
    )


def test_load_settings_accepts_literal_role_name():
    assert load_settings({"RUN_NOTEBOOK_DEFAULT_ROLE": "SharedNotebookRole"}).role_template == (
        "SharedNotebookRole"
    )
