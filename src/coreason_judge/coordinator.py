# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_judge

import asyncio
import threading
import time
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager

import anyio
from loguru import logger

from coreason_judge.config import JudgeConfig
from coreason_judge.exceptions import (
    AdmissionTimeoutError,
    InfrastructureError,
    PayloadTooLargeError,
    RequestValidationError,
)
from coreason_judge.factory import RunnerFactory
from coreason_judge.languages import LanguageProfile, LanguageRegistry
from coreason_judge.models import (
    CompileOrRuntimeError,
    ExecutionRequest,
    ExecutionResult,
    InternalError,
    Outcome,
    RawRunResult,
    ResourceLimits,
    Success,
    Timeout,
    Workspace,
)
from coreason_judge.runner import SandboxRunner
from coreason_judge.utils.audit import AuditIntegrator
from coreason_judge.workspace import WorkspaceManager

OOM_EXIT_CODE = 137
ADMISSION_POLL_SECONDS = 0.01


class ExecutionCoordinator:
    """Async-native execution service (The Core).

    Turns an ExecutionRequest into an ExecutionResult. Each call owns its own
    workspace and container; the only state shared between calls is the
    admission semaphore that bounds concurrently running sandboxes.
    """

    def __init__(
        self,
        config: JudgeConfig | None = None,
        runner: SandboxRunner | None = None,
        registry: LanguageRegistry | None = None,
        workspaces: WorkspaceManager | None = None,
    ):
        """Initializes the ExecutionCoordinator.

        Args:
            config: Configuration for the judge.
            runner: Sandbox runner. Built from ``config`` when omitted.
            registry: Language profiles. Built from ``config`` when omitted.
            workspaces: Workspace manager. Built from ``config`` when omitted.
        """
        self.config = config or JudgeConfig()
        self.registry = registry or LanguageRegistry(image_overrides=self.config.language_images)
        self.runner: SandboxRunner = runner or RunnerFactory.get_runner(self.config)
        self.workspaces = workspaces or WorkspaceManager(self.config.workspace_root, owner=self.runner.user)
        self.audit = AuditIntegrator(enabled=self.config.enable_audit_logging)
        # Shared by every event loop the coordinator is used from, including the sync facade's
        self._slots = threading.BoundedSemaphore(self.config.max_concurrent_executions)

    def validate(self, request: ExecutionRequest) -> tuple[LanguageProfile, ResourceLimits]:
        """Checks a request and resolves what it will run with.

        Args:
            request: The request to check.

        Returns:
            tuple: The resolved language profile and the effective resource limits.

        Raises:
            UnsupportedLanguageError: If the language id is not registered.
            PayloadTooLargeError: If source or stdin exceeds ``max_payload_bytes``.
            RequestValidationError: If a limit override exceeds its configured maximum.
        """
        profile = self.registry.resolve(request.language_id)

        for field, payload in (("source_code", request.source_code), ("stdin_payload", request.stdin_payload)):
            size = len(payload.encode("utf-8"))
            if size > self.config.max_payload_bytes:
                raise PayloadTooLargeError(field, size, self.config.max_payload_bytes)

        time_limit = request.time_limit or self.config.time_limit
        if time_limit > self.config.max_time_limit:
            raise RequestValidationError(
                f"time_limit {time_limit}s exceeds maximum of {self.config.max_time_limit}s"
            )
        memory_limit_mb = request.memory_limit_mb or self.config.memory_limit_mb
        if memory_limit_mb > self.config.max_memory_limit_mb:
            raise RequestValidationError(
                f"memory_limit_mb {memory_limit_mb} exceeds maximum of {self.config.max_memory_limit_mb}"
            )

        limits = ResourceLimits(
            time_limit=time_limit,
            memory_limit_mb=memory_limit_mb,
            cpu_limit=self.config.cpu_limit,
            pids_limit=self.config.pids_limit,
            output_limit_bytes=self.config.output_limit_bytes,
        )
        return profile, limits

    @asynccontextmanager
    async def _admit(self) -> AsyncIterator[None]:
        """Holds one of ``max_concurrent_executions`` slots for the duration of a run."""
        deadline = time.monotonic() + self.config.admission_timeout
        # Non-blocking polls: a waiter that is cancelled or times out never holds a slot
        while not self._slots.acquire(blocking=False):
            if time.monotonic() >= deadline:
                raise AdmissionTimeoutError(
                    f"Sandbox busy: no execution slot free after {self.config.admission_timeout}s"
                )
            await anyio.sleep(ADMISSION_POLL_SECONDS)
        try:
            yield
        finally:
            self._slots.release()

    async def execute(self, request: ExecutionRequest) -> ExecutionResult:
        """Executes one submission in a fresh sandbox.

        Args:
            request: The submission.

        Returns:
            ExecutionResult: Success, CompileOrRuntimeError, Timeout or InternalError.

        Raises:
            RequestValidationError: If the request is rejected. Nothing is created.
        """
        profile, limits = self.validate(request)

        start_time = time.monotonic()
        workspace_id = ""
        outcome: Outcome
        try:
            async with self._admit():
                async with self.workspaces.session(profile) as workspace:
                    workspace_id = workspace.id
                    outcome = await self._run(request, workspace, profile, limits)
        except InfrastructureError as e:
            logger.error(f"Execution in workspace {workspace_id or '<none>'} could not be judged: {e}")
            outcome = InternalError(diagnostics=str(e))

        return ExecutionResult(
            outcome=outcome,
            workspace_id=workspace_id,
            execution_duration=time.monotonic() - start_time,
        )

    async def execute_batch(self, requests: Sequence[ExecutionRequest]) -> list[ExecutionResult]:
        """Executes several submissions concurrently; results keep request order.

        Every request is validated before any of them runs.
        """
        for request in requests:
            self.validate(request)
        return list(await asyncio.gather(*(self.execute(request) for request in requests)))

    def languages(self) -> list[str]:
        return self.registry.languages()

    async def _run(
        self,
        request: ExecutionRequest,
        workspace: Workspace,
        profile: LanguageProfile,
        limits: ResourceLimits,
    ) -> Outcome:
        self.audit.log_pre_execution(request.source_code, profile.id, workspace.id)

        await self.workspaces.write_source(workspace, request.source_code)
        await self.workspaces.write_input(workspace, request.stdin_payload)

        raw = await self.runner.run(workspace, profile, limits)
        return await self._interpret(raw, workspace, limits)

    async def _interpret(self, raw: RawRunResult, workspace: Workspace, limits: ResourceLimits) -> Outcome:
        if raw.timed_out:
            logger.warning(f"Workspace {workspace.id} exceeded time limit of {limits.time_limit}s")
            return Timeout(diagnostics=f"Time limit exceeded ({limits.time_limit}s)")

        failed_with_stderr = self.config.fail_on_stderr and raw.stderr.strip()
        if raw.exit_code != 0 or failed_with_stderr:
            diagnostics = raw.stderr
            if not diagnostics.strip():
                diagnostics = f"Process exited with code {raw.exit_code}"
                if raw.exit_code == OOM_EXIT_CODE:
                    diagnostics += f" (killed, memory limit of {limits.memory_limit_mb} MB likely exceeded)"
            logger.info(f"Workspace {workspace.id} finished with exit code {raw.exit_code}")
            return CompileOrRuntimeError(diagnostics=self._truncate(diagnostics), exit_code=raw.exit_code)

        # OutputNotFoundError propagates: a clean exit without output is an infrastructure fault
        output = await self.workspaces.read_output(workspace, limit=limits.output_limit_bytes)
        return Success(output=output.strip())

    def _truncate(self, text: str) -> str:
        encoded = text.encode("utf-8")
        limit = self.config.max_diagnostics_bytes
        if len(encoded) <= limit:
            return text
        omitted = len(encoded) - limit
        return encoded[:limit].decode("utf-8", errors="ignore") + f"\n... [truncated, {omitted} bytes omitted]"
