# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_judge

from collections.abc import Sequence

import anyio

from coreason_judge.config import JudgeConfig
from coreason_judge.coordinator import ExecutionCoordinator
from coreason_judge.models import ExecutionRequest, ExecutionResult
from coreason_judge.runner import SandboxRunner


class Judge:
    """Sync Facade for ExecutionCoordinator (The Facade).

    Wraps ExecutionCoordinator and executes methods via anyio.run.
    """

    def __init__(
        self,
        config: JudgeConfig | None = None,
        runner: SandboxRunner | None = None,
    ):
        """Initializes the Judge facade.

        Args:
            config: Configuration for the judge.
            runner: Optional sandbox runner, built from the configuration when omitted.
        """
        self._async = ExecutionCoordinator(config, runner)

    @property
    def coordinator(self) -> ExecutionCoordinator:
        return self._async

    def execute(self, request: ExecutionRequest) -> ExecutionResult:
        """Executes a request synchronously.

        Args:
            request: The submission.

        Returns:
            ExecutionResult: The result of the execution.
        """
        return anyio.run(self._async.execute, request)

    def run_code(self, source_code: str, language_id: str, stdin_payload: str = "") -> ExecutionResult:
        """Executes source code synchronously with the configured default limits.

        Args:
            source_code: The program text.
            language_id: The language id, e.g. 'python'.
            stdin_payload: Text fed to standard input.

        Returns:
            ExecutionResult: The result of the execution.
        """
        request = ExecutionRequest(source_code=source_code, language_id=language_id, stdin_payload=stdin_payload)
        return self.execute(request)

    def execute_batch(self, requests: Sequence[ExecutionRequest]) -> list[ExecutionResult]:
        """Executes several requests concurrently and waits for all of them."""
        return anyio.run(self._async.execute_batch, requests)

    def languages(self) -> list[str]:
        return self._async.languages()
