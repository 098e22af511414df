# src/coreason_judge/models/__init__.py

"""
Data models for the judge sandbox.
"""

from .execution import (
    CompileOrRuntimeError,
    ExecutionRequest,
    ExecutionResult,
    InternalError,
    Outcome,
    RawRunResult,
    ResourceLimits,
    Success,
    Timeout,
)
from .workspace import Workspace

__all__ = [
    "CompileOrRuntimeError",
    "ExecutionRequest",
    "ExecutionResult",
    "InternalError",
    "Outcome",
    "RawRunResult",
    "ResourceLimits",
    "Success",
    "Timeout",
    "Workspace",
]
