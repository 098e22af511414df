# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_judge

from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import ValidationError

from coreason_judge.coordinator import ExecutionCoordinator
from coreason_judge.exceptions import RequestValidationError
from coreason_judge.models import ExecutionRequest
from coreason_judge.utils.logger import logger

# Initialize Judge Logic
coordinator = ExecutionCoordinator()

# Initialize MCP Server
mcp = FastMCP("coreason-judge")


@mcp.tool()  # type: ignore[misc]
async def execute(
    source_code: str,
    language_id: str,
    stdin_payload: str = "",
    time_limit: float | None = None,
    memory_limit_mb: int | None = None,
) -> dict[str, Any]:
    """
    Execute source code against stdin in an isolated sandbox.
    Returns the outcome with the program output on success, or diagnostics otherwise.
    """
    try:
        request = ExecutionRequest(
            source_code=source_code,
            language_id=language_id,
            stdin_payload=stdin_payload,
            time_limit=time_limit,
            memory_limit_mb=memory_limit_mb,
        )
        result = await coordinator.execute(request)
    except (RequestValidationError, ValidationError) as e:
        logger.info(f"Rejected request: {e}")
        return {"outcome": "validation_error", "diagnostics": str(e)}

    return result.to_response()


@mcp.tool()  # type: ignore[misc]
async def list_languages() -> list[str]:
    """
    List the language ids accepted by `execute`.
    """
    return coordinator.languages()


def main() -> None:
    """Entry point for the MCP server."""
    mcp.run()


if __name__ == "__main__":  # pragma: no cover
    main()
