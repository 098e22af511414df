from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class JudgeConfig(BaseSettings):
    """
    Configuration for the judge sandbox.

    Every field can be set through an environment variable prefixed with
    ``COREASON_JUDGE_`` (e.g. ``COREASON_JUDGE_TIME_LIMIT=5``) or a ``.env`` file.
    """

    runner: Literal["docker"] = "docker"

    # Workspaces
    workspace_root: Path | None = None  # None: system temp dir
    container_workdir: str = "/sandbox"
    run_as_user: str | None = None  # None: host uid:gid, or nobody when the host user is root

    # Limits (defaults and the maxima a request may override up to)
    time_limit: float = Field(default=10.0, gt=0)
    max_time_limit: float = Field(default=30.0, gt=0)
    memory_limit_mb: int = Field(default=256, gt=0)
    max_memory_limit_mb: int = Field(default=1024, gt=0)
    cpu_limit: float = Field(default=1.0, gt=0)
    pids_limit: int = Field(default=64, gt=0)
    output_limit_bytes: int = Field(default=8 * 1024 * 1024, gt=0)

    # Request bounds
    max_payload_bytes: int = Field(default=1024 * 1024, gt=0)
    max_diagnostics_bytes: int = Field(default=64 * 1024, gt=0)

    # Admission
    max_concurrent_executions: int = Field(default=4, gt=0)
    admission_timeout: float = Field(default=60.0, gt=0)

    fail_on_stderr: bool = True
    pull_missing_images: bool = True
    launch_timeout: float = Field(default=300.0, gt=0)  # includes pulling a missing image

    # language id -> image override, e.g. {"python": "pypy:3.10"}
    language_images: dict[str, str] = {}

    enable_audit_logging: bool = True

    model_config = SettingsConfigDict(
        env_prefix="COREASON_JUDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
