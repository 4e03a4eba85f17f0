"""Merging of caller-supplied overrides into a canonical payload.

Overrides use the CreateProcessingJob wire shape. Each section has its
own rule:

- ProcessingInputs and ProcessingOutputConfig.Outputs are appended after
  the canonical entries.
- ProcessingOutputConfig.KmsKeyId replaces the canonical key id.
- ProcessingResources.ClusterConfig is merged key by key, override wins.
- Environment is merged key by key, but keys the assembler set win.
- ExperimentConfig, NetworkConfig, StoppingCondition and Tags are replaced
  as a whole.

Anything else is rejected, as is a section with the wrong shape.
"""

from __future__ import annotations

import copy
from dataclasses import replace
from typing import Any, Mapping

from runnotebook.core.payload import OPTIONAL_SECTIONS, JobPayload

_INPUTS = "ProcessingInputs"
_OUTPUT_CONFIG = "ProcessingOutputConfig"
_RESOURCES = "ProcessingResources"
_ENVIRONMENT = "Environment"
_STOPPING = "StoppingCondition"

MERGEABLE_KEYS = frozenset(
    {_INPUTS, _OUTPUT_CONFIG, _RESOURCES, _ENVIRONMENT, _STOPPING, *OPTIONAL_SECTIONS}
)
OUTPUT_CONFIG_KEYS = frozenset({"Outputs", "KmsKeyId"})
RESOURCES_KEYS = frozenset({"ClusterConfig"})


class OverrideError(ValueError):
    """Raised when an override fragment cannot be merged into a payload."""


def _mapping(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise OverrideError(f"{where} must be a mapping, got {type(value).__name__}")
    return value


def _known_keys(value: Mapping[str, Any], allowed: frozenset[str], where: str) -> None:
    unknown = sorted(set(value) - allowed)
    if unknown:
        raise OverrideError(f"Unsupported keys in {where}: {', '.join(unknown)}")


def _descriptors(value: Any, where: str) -> tuple[dict[str, Any], ...]:
    if not isinstance(value, (list, tuple)):
        raise OverrideError(f"{where} must be a list, got {type(value).__name__}")
    for index, item in enumerate(value):
        _mapping(item, f"{where}[{index}]")
    return tuple(copy.deepcopy(dict(item)) for item in value)


def _environment(value: Any) -> dict[str, str]:
    env = _mapping(value, _ENVIRONMENT)
    for key, item in env.items():
        if not isinstance(key, str) or not isinstance(item, str):
            raise OverrideError(f"{_ENVIRONMENT} entries must be strings: {key!r}={item!r}")
    return dict(env)


def merge_overrides(canonical: JobPayload, overrides: Mapping[str, Any]) -> JobPayload:
    """
    Merge an override fragment into a canonical payload.

    Args:
        canonical: Payload produced by the assembler. It is not modified.
        overrides: Partial CreateProcessingJob request.

    Returns:
        A new JobPayload with the overrides applied.

    Raises:
        OverrideError: If the fragment has unknown keys or wrongly shaped sections.
    """
    overrides = _mapping(overrides, "extra_args")
    _known_keys(overrides, MERGEABLE_KEYS, "extra_args")

    inputs = copy.deepcopy(canonical.inputs) + _descriptors(overrides.get(_INPUTS, []), _INPUTS)

    output_config = _mapping(overrides.get(_OUTPUT_CONFIG, {}), _OUTPUT_CONFIG)
    _known_keys(output_config, OUTPUT_CONFIG_KEYS, _OUTPUT_CONFIG)
    outputs = copy.deepcopy(canonical.outputs) + _descriptors(
        output_config.get("Outputs", []), f"{_OUTPUT_CONFIG}.Outputs"
    )
    kms_key_id = output_config.get("KmsKeyId", canonical.kms_key_id)
    if kms_key_id is not None and not isinstance(kms_key_id, str):
        raise OverrideError(f"{_OUTPUT_CONFIG}.KmsKeyId must be a string")

    resources = _mapping(overrides.get(_RESOURCES, {}), _RESOURCES)
    _known_keys(resources, RESOURCES_KEYS, _RESOURCES)
    cluster_config = {
        **canonical.cluster_config,
        **_mapping(resources.get("ClusterConfig", {}), f"{_RESOURCES}.ClusterConfig"),
    }

    environment = {
        **_environment(overrides.get(_ENVIRONMENT, {})),
        **canonical.environment,
    }

    stopping_condition = canonical.stopping_condition
    if _STOPPING in overrides:
        stopping_condition = dict(_mapping(overrides[_STOPPING], _STOPPING))

    sections = dict(canonical.sections)
    for name in OPTIONAL_SECTIONS:
        if name not in overrides:
            continue
        if name == "Tags":
            sections[name] = list(_descriptors(overrides[name], name))
        else:
            sections[name] = dict(_mapping(overrides[name], name))

    return replace(
        canonical,
        inputs=inputs,
        outputs=outputs,
        kms_key_id=kms_key_id,
        cluster_config=copy.deepcopy(cluster_config),
        stopping_condition=copy.deepcopy(stopping_condition),
        environment=environment,
        sections=copy.deepcopy(sections),
    )
