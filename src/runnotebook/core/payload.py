"""Processing job payload model and canonical payload assembly.

JobPayload mirrors the SageMaker CreateProcessingJob request with named
fields instead of a nested dict, so that the override merger can treat
each section according to its own rule. Descriptors (inputs, outputs) and
optional sections stay in the service's wire shape, since callers supply
extra ones in that shape.
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from typing import Any, Mapping

from runnotebook.core.auth import ResolvedContext
from runnotebook.core.defaults import NormalizedRequest
from runnotebook.core.naming import CONTAINER_INPUT_DIR, CONTAINER_OUTPUT_DIR, DerivedNames
from runnotebook.core.settings import Settings

INPUT_NAME = "notebook"
OUTPUT_NAME = "result"
CONTAINER_ARGUMENTS = ("run_notebook",)

ENV_INPUT = "PAPERMILL_INPUT"
ENV_OUTPUT = "PAPERMILL_OUTPUT"
ENV_REGION = "AWS_DEFAULT_REGION"
ENV_PARAMS = "PAPERMILL_PARAMS"
ENV_NOTEBOOK_NAME = "PAPERMILL_NOTEBOOK_NAME"
ENV_RULE = "AWS_EVENTBRIDGE_RULE"

# Top-level sections that only exist when an override supplies them.
OPTIONAL_SECTIONS = ("ExperimentConfig", "NetworkConfig", "Tags")


@dataclass(frozen=True)
class JobPayload:
    """
    A complete CreateProcessingJob request.

    Attributes:
        job_name: ProcessingJobName.
        image_uri: AppSpecification.ImageUri.
        container_arguments: AppSpecification.ContainerArguments.
        role_arn: RoleArn.
        inputs: ProcessingInputs, in order.
        outputs: ProcessingOutputConfig.Outputs, in order.
        kms_key_id: ProcessingOutputConfig.KmsKeyId, if any.
        cluster_config: ProcessingResources.ClusterConfig.
        stopping_condition: StoppingCondition.
        environment: Environment.
        sections: ExperimentConfig / NetworkConfig / Tags when present.
    """

    job_name: str
    image_uri: str
    role_arn: str
    container_arguments: tuple[str, ...] = CONTAINER_ARGUMENTS
    inputs: tuple[Mapping[str, Any], ...] = ()
    outputs: tuple[Mapping[str, Any], ...] = ()
    kms_key_id: str | None = None
    cluster_config: Mapping[str, Any] = field(default_factory=dict)
    stopping_condition: Mapping[str, Any] = field(default_factory=dict)
    environment: Mapping[str, str] = field(default_factory=dict)
    sections: Mapping[str, Any] = field(default_factory=dict)

    def to_request(self) -> dict[str, Any]:
        """Return the keyword arguments for sagemaker.create_processing_job."""
        output_config: dict[str, Any] = {"Outputs": [dict(o) for o in self.outputs]}
        if self.kms_key_id is not None:
            output_config["KmsKeyId"] = self.kms_key_id

        request: dict[str, Any] = {
            "ProcessingInputs": [dict(i) for i in self.inputs],
            "ProcessingOutputConfig": output_config,
            "ProcessingJobName": self.job_name,
            "ProcessingResources": {"ClusterConfig": dict(self.cluster_config)},
            "StoppingCondition": dict(self.stopping_condition),
            "AppSpecification": {
                "ImageUri": self.image_uri,
                "ContainerArguments": list(self.container_arguments),
            },
            "RoleArn": self.role_arn,
            "Environment": dict(self.environment),
        }
        for name in OPTIONAL_SECTIONS:
            if name in self.sections:
                request[name] = self.sections[name]
        return copy.deepcopy(request)


def serialize_parameters(parameters: Mapping[str, Any]) -> str:
    """Encode notebook parameters as JSON with a stable key order."""
    return json.dumps(dict(parameters), sort_keys=True)


def s3_input(name: str, s3_uri: str, local_path: str) -> dict[str, Any]:
    """Build a File-mode S3 input descriptor."""
    return {
        "InputName": name,
        "S3Input": {
            "S3Uri": s3_uri,
            "LocalPath": local_path,
            "S3DataType": "S3Prefix",
            "S3InputMode": "File",
            "S3DataDistributionType": "FullyReplicated",
        },
    }


def s3_output(name: str, s3_uri: str, local_path: str) -> dict[str, Any]:
    """Build an S3 output descriptor uploaded when the job ends."""
    return {
        "OutputName": name,
        "S3Output": {
            "S3Uri": s3_uri,
            "LocalPath": local_path,
            "S3UploadMode": "EndOfJob",
        },
    }


def build_environment(
    ctx: ResolvedContext,
    names: DerivedNames,
    parameters: Mapping[str, Any],
    rule_name: str | None = None,
) -> dict[str, str]:
    """Return the environment variables the notebook container relies on."""
    env = {
        ENV_INPUT: names.container_input_path,
        ENV_OUTPUT: names.container_output_path,
    }
    if ctx.invoking_region is not None:
        env[ENV_REGION] = ctx.invoking_region
    env[ENV_PARAMS] = serialize_parameters(parameters)
    env[ENV_NOTEBOOK_NAME] = names.notebook_name
    if rule_name is not None:
        env[ENV_RULE] = rule_name
    return env


def assemble_payload(
    ctx: ResolvedContext,
    normalized: NormalizedRequest,
    names: DerivedNames,
    instance_type: str,
    parameters: Mapping[str, Any],
    input_path: str,
    rule_name: str | None = None,
    settings: Settings | None = None,
) -> JobPayload:
    """
    Build the canonical payload for one notebook run.

    Args:
        ctx: Resolved account and region.
        normalized: Request fields after defaulting.
        names: Derived job name and container paths.
        instance_type: Instance type of the processing cluster.
        parameters: Papermill parameters.
        input_path: S3 URI of the input artifact.
        rule_name: Schedule rule that triggered the run, if any.
        settings: Cluster size and runtime limits. Uses Settings() if None.

    Returns:
        A JobPayload with exactly one input and one output.
    """
    settings = settings or Settings()
    return JobPayload(
        job_name=names.job_name,
        image_uri=normalized.image_uri,
        role_arn=normalized.role_arn,
        container_arguments=CONTAINER_ARGUMENTS,
        inputs=(s3_input(INPUT_NAME, input_path, CONTAINER_INPUT_DIR),),
        outputs=(s3_output(OUTPUT_NAME, normalized.output_prefix, CONTAINER_OUTPUT_DIR),),
        cluster_config={
            "InstanceCount": settings.instance_count,
            "InstanceType": instance_type,
            "VolumeSizeInGB": settings.volume_size_gb,
        },
        stopping_condition={"MaxRuntimeInSeconds": settings.max_runtime_seconds},
        environment=build_environment(ctx, names, parameters, rule_name),
    )
