import asyncio
from pathlib import Path
from typing import Any

import pytest

from coreason_judge.config import JudgeConfig
from coreason_judge.languages import LanguageProfile, LanguageRegistry
from coreason_judge.models import RawRunResult, ResourceLimits, Workspace
from coreason_judge.runner import SandboxRunner


class FakeRunner(SandboxRunner):
    """In-process stand-in for a container: sums the integers found in the input file.

    Records every workspace it ran in, and checks the workspace is populated.
    """

    def __init__(
        self,
        exit_code: int = 0,
        stderr: str = "",
        timed_out: bool = False,
        write_output: bool = True,
        delay: float = 0.0,
        error: Exception | None = None,
    ):
        self.exit_code = exit_code
        self.stderr = stderr
        self.timed_out = timed_out
        self.write_output = write_output
        self.delay = delay
        self.error = error
        self.seen: list[Workspace] = []
        self.active = 0
        self.max_active = 0

    async def run(self, workspace: Workspace, profile: LanguageProfile, limits: ResourceLimits) -> RawRunResult:
        self.seen.append(workspace)
        assert workspace.source_file.is_file()
        assert workspace.input_file.is_file()
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            if self.write_output and not self.timed_out:
                numbers = [int(token) for token in workspace.input_file.read_text().split()]
                workspace.output_file.write_text(f"{sum(numbers)}\n")
            return RawRunResult(
                exit_code=self.exit_code,
                stderr=self.stderr,
                timed_out=self.timed_out,
                duration=self.delay,
            )
        finally:
            self.active -= 1


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    return tmp_path / "workspaces"


@pytest.fixture
def judge_config(workspace_root: Path) -> JudgeConfig:
    return JudgeConfig(workspace_root=workspace_root, enable_audit_logging=False)


@pytest.fixture
def registry() -> LanguageRegistry:
    return LanguageRegistry()


@pytest.fixture
def python_profile(registry: LanguageRegistry) -> LanguageProfile:
    return registry.resolve("python")


@pytest.fixture
def limits() -> ResourceLimits:
    return ResourceLimits(
        time_limit=2.0,
        memory_limit_mb=256,
        cpu_limit=1.0,
        pids_limit=64,
        output_limit_bytes=1024 * 1024,
    )


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


def leftover_workspaces(root: Path) -> list[Any]:
    return list(root.iterdir()) if root.exists() else []
