# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_judge

"""
coreason-judge
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .config import JudgeConfig
from .coordinator import ExecutionCoordinator
from .exceptions import (
    InfrastructureError,
    JudgeError,
    PayloadTooLargeError,
    RequestValidationError,
    UnsupportedLanguageError,
)
from .factory import RunnerFactory
from .languages import LanguageProfile, LanguageRegistry
from .models import (
    CompileOrRuntimeError,
    ExecutionRequest,
    ExecutionResult,
    InternalError,
    Success,
    Timeout,
)
from .runner import SandboxRunner
from .runners.docker import DockerRunner
from .sandbox import Judge
from .workspace import WorkspaceManager

__all__ = [
    "CompileOrRuntimeError",
    "DockerRunner",
    "ExecutionCoordinator",
    "ExecutionRequest",
    "ExecutionResult",
    "InfrastructureError",
    "InternalError",
    "Judge",
    "JudgeConfig",
    "JudgeError",
    "LanguageProfile",
    "LanguageRegistry",
    "PayloadTooLargeError",
    "RequestValidationError",
    "RunnerFactory",
    "SandboxRunner",
    "Success",
    "Timeout",
    "UnsupportedLanguageError",
    "WorkspaceManager",
]
