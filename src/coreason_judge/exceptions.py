# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_judge

"""Exception hierarchy for the judge sandbox.

Two families exist:

* ``RequestValidationError`` and its subclasses are raised by
  ``ExecutionCoordinator.execute`` before any workspace or container is
  touched. The caller must fix the request; retrying is pointless.
* ``InfrastructureError`` and its subclasses are raised by the workspace
  manager and sandbox runners. The coordinator converts them into the
  ``InternalError`` outcome, so they never escape ``execute``. They are safe
  to retry.

Compile errors, runtime errors and timeouts of user code are outcomes, not
exceptions.
"""


class JudgeError(Exception):
    """Base class for all errors raised by coreason-judge."""


class RequestValidationError(JudgeError):
    """The execution request is malformed or exceeds configured bounds."""


class UnsupportedLanguageError(RequestValidationError):
    """No language profile is registered for the requested id."""

    def __init__(self, language_id: str):
        self.language_id = language_id
        super().__init__(f"Unsupported language: {language_id}")


class PayloadTooLargeError(RequestValidationError):
    """A source or stdin payload exceeds the configured byte ceiling."""

    def __init__(self, field: str, size: int, limit: int):
        self.field = field
        self.size = size
        self.limit = limit
        super().__init__(f"{field} is {size} bytes, limit is {limit} bytes")


class InfrastructureError(JudgeError):
    """The execution could not be judged for reasons unrelated to the user code."""


class WorkspaceError(InfrastructureError):
    """Creating, populating or removing a workspace failed."""


class OutputNotFoundError(InfrastructureError):
    """The sandboxed program never produced its output artifact."""


class SandboxUnavailableError(InfrastructureError):
    """The container engine is unreachable or refused to run the sandbox."""


class AdmissionTimeoutError(InfrastructureError):
    """No execution slot became free within the admission timeout."""
