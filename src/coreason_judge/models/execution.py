# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_judge

"""Data models for execution requests, raw runs and results."""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class ExecutionRequest(BaseModel):
    """A submission to execute.

    Attributes:
        source_code: The untrusted program text.
        language_id: Identifier of a registered language profile.
        stdin_payload: Untrusted text fed to the program's standard input.
        time_limit: Optional wall-clock override in seconds.
        memory_limit_mb: Optional memory ceiling override in megabytes.
    """

    source_code: str
    language_id: str
    stdin_payload: str = ""
    time_limit: float | None = Field(default=None, gt=0)
    memory_limit_mb: int | None = Field(default=None, gt=0)


class ResourceLimits(BaseModel):
    """Ceilings applied to one sandbox invocation."""

    model_config = ConfigDict(frozen=True)

    time_limit: float
    memory_limit_mb: int
    cpu_limit: float
    pids_limit: int
    output_limit_bytes: int


class RawRunResult(BaseModel):
    """What the sandbox runner observed, before interpretation.

    Attributes:
        exit_code: Exit status of the container's main process (-1 if killed).
        stdout: Captured standard output stream.
        stderr: Captured standard error stream.
        timed_out: True if the wall-clock deadline elapsed and the container was killed.
        duration: Seconds between launch and completion.
    """

    exit_code: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False
    duration: float = 0.0


class Success(BaseModel):
    kind: Literal["success"] = "success"
    output: str


class CompileOrRuntimeError(BaseModel):
    kind: Literal["compile_or_runtime_error"] = "compile_or_runtime_error"
    diagnostics: str
    exit_code: int


class Timeout(BaseModel):
    kind: Literal["timeout"] = "timeout"
    diagnostics: str


class InternalError(BaseModel):
    kind: Literal["internal_error"] = "internal_error"
    diagnostics: str


Outcome = Annotated[
    Union[Success, CompileOrRuntimeError, Timeout, InternalError],
    Field(discriminator="kind"),
]


class ExecutionResult(BaseModel):
    """The result of one ``execute`` call.

    Attributes:
        outcome: Exactly one of Success, CompileOrRuntimeError, Timeout or InternalError.
        workspace_id: Id of the workspace the call used; empty if none was created.
        execution_duration: Wall-clock seconds spent in the call.
    """

    outcome: Outcome
    workspace_id: str = ""
    execution_duration: float = 0.0

    @property
    def ok(self) -> bool:
        return isinstance(self.outcome, Success)

    def to_response(self) -> dict[str, Any]:
        """Renders the wire response: ``output`` on success, ``diagnostics`` otherwise."""
        response: dict[str, Any] = {"outcome": self.outcome.kind}
        if isinstance(self.outcome, Success):
            response["output"] = self.outcome.output
        else:
            response["diagnostics"] = self.outcome.diagnostics
        return response
