"""Execution request model and event parsing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

DEFAULT_INSTANCE_TYPE = "ml.m5.large"


class RequestError(ValueError):
    """Raised when an execution request is missing or has a malformed field."""


@dataclass(frozen=True)
class ExecutionRequest:
    """
    A single request to run a notebook.

    Attributes:
        input_path: S3 URI of the input notebook (or of the input artifact
                    when ``notebook`` names a different file).
        image: Container image name or URI. None selects the default image.
        output_prefix: S3 prefix that receives the executed notebook. None
                       selects the directory of ``input_path``.
        notebook: Notebook identifier. None means ``input_path`` itself.
        parameters: Papermill parameters passed to the notebook.
        role: Role name or ARN the job runs as. None selects the default role.
        instance_type: Instance type of the processing cluster.
        rule_name: Name of the schedule rule that triggered this run, if any.
        extra_args: Override fragment merged into the generated payload.
    """

    input_path: str
    image: str | None = None
    output_prefix: str | None = None
    notebook: str | None = None
    parameters: Mapping[str, Any] = field(default_factory=dict)
    role: str | None = None
    instance_type: str = DEFAULT_INSTANCE_TYPE
    rule_name: str | None = None
    extra_args: Mapping[str, Any] | None = None

    @classmethod
    def from_event(
        cls,
        event: Mapping[str, Any],
        default_instance_type: str = DEFAULT_INSTANCE_TYPE,
    ) -> ExecutionRequest:
        """
        Build a request from an invocation event.

        Args:
            event: Mapping with the keys ``input_path`` (required), ``image``,
                   ``output_prefix``, ``notebook``, ``parameters``, ``role``,
                   ``instance_type``, ``rule_name`` and ``extra_args``.
            default_instance_type: Instance type used when the event has none.

        Raises:
            RequestError: If ``input_path`` is missing or a field has the wrong type.
        """
        if not isinstance(event, Mapping):
            raise RequestError("Request must be a mapping")

        input_path = event.get("input_path")
        if not input_path:
            raise RequestError("Missing required field 'input_path'")
        if not isinstance(input_path, str):
            raise RequestError("'input_path' must be a string")

        for key in ("image", "output_prefix", "notebook", "role", "instance_type", "rule_name"):
            value = event.get(key)
            if value is not None and not isinstance(value, str):
                raise RequestError(f"'{key}' must be a string")

        parameters = event.get("parameters")
        if parameters is None:
            parameters = {}
        if not isinstance(parameters, Mapping):
            raise RequestError("'parameters' must be a mapping")

        extra_args = event.get("extra_args")
        if extra_args is not None and not isinstance(extra_args, Mapping):
            raise RequestError("'extra_args' must be a mapping")

        return cls(
            input_path=input_path,
            image=event.get("image"),
            output_prefix=event.get("output_prefix"),
            notebook=event.get("notebook"),
            parameters=dict(parameters),
            role=event.get("role"),
            instance_type=event.get("instance_type") or default_instance_type,
            rule_name=event.get("rule_name"),
            extra_args=extra_args,
        )
