from pathlib import Path

from pydantic import BaseModel, ConfigDict


class Workspace(BaseModel):
    """An isolated directory owned by exactly one execution.

    Attributes:
        id: Random token, unique per execution. Never derived from request content.
        root_path: Host directory bind-mounted into the sandbox.
        source_file: Host path of the program source.
        input_file: Host path of the stdin payload.
        output_file: Host path of the output artifact the program writes.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    root_path: Path
    source_file: Path
    input_file: Path
    output_file: Path
