# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_judge

from abc import ABC, abstractmethod

from coreason_judge.languages import LanguageProfile
from coreason_judge.models import RawRunResult, ResourceLimits, Workspace


class SandboxRunner(ABC):
    """
    Abstract base class for sandbox runners.
    Follows the Strategy Pattern.
    """

    # uid:gid the sandboxed program runs as; None when it shares the host user
    user: str | None = None

    @abstractmethod
    async def run(self, workspace: Workspace, profile: LanguageProfile, limits: ResourceLimits) -> RawRunResult:
        """Build and run the workspace's program in an isolated sandbox.

        The workspace directory is mounted read-write into exactly one sandbox
        for the duration of the call. A non-zero exit status is a normal result,
        not an error.

        Args:
            workspace: The populated workspace to mount.
            profile: Language profile supplying the image and command.
            limits: Wall-clock, memory, CPU, process and output ceilings.

        Returns:
            RawRunResult: Exit code, captured streams and whether the deadline elapsed.

        Raises:
            SandboxUnavailableError: If the sandbox could not be launched or observed.
        """
        pass  # pragma: no cover
