# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_judge

import os
import shutil
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiofiles  # type: ignore[import-untyped]
import anyio
from loguru import logger

from coreason_judge.exceptions import OutputNotFoundError, WorkspaceError
from coreason_judge.languages import INPUT_FILENAME, OUTPUT_FILENAME, LanguageProfile
from coreason_judge.models import Workspace

WORKSPACE_PREFIX = "judge-"


class WorkspaceManager:
    """Creates, populates and destroys per-execution workspaces.

    Every workspace is a fresh ``mkdtemp`` directory, so two executions never
    share a path no matter how they interleave.
    """

    def __init__(self, root: Path | None = None, owner: str | None = None):
        """Initializes the WorkspaceManager.

        Args:
            root: Parent directory for workspaces. Defaults to the system temp dir.
            owner: uid:gid the sandboxed program runs as. Each workspace is made
                writable for it when it differs from the host user.
        """
        self.root = root
        self.owner = owner

    def _grant_owner(self, path: Path) -> None:
        if self.owner is None or not hasattr(os, "getuid"):
            return
        uid, _, gid = self.owner.partition(":")
        if not uid.isdigit() or (gid and not gid.isdigit()):
            # Named users cannot be resolved on the host
            os.chmod(path, 0o777)
            return
        owner = (int(uid), int(gid or uid))
        if owner == (os.getuid(), os.getgid()):
            return
        try:
            os.chown(path, *owner)
        except PermissionError:
            os.chmod(path, 0o777)

    def acquire(self, profile: LanguageProfile) -> Workspace:
        """Allocates a new, empty workspace for one execution.

        Either returns a fully created workspace or leaves nothing behind.

        Args:
            profile: Language profile; decides the source file name.

        Returns:
            Workspace: The new workspace.

        Raises:
            WorkspaceError: If the directory could not be created.
        """
        try:
            if self.root is not None:
                self.root.mkdir(parents=True, exist_ok=True)
            root_path = Path(tempfile.mkdtemp(prefix=WORKSPACE_PREFIX, dir=self.root))
        except OSError as e:
            logger.error(f"Failed to create workspace under {self.root or tempfile.gettempdir()}: {e}")
            raise WorkspaceError(f"Failed to create workspace: {e}") from e

        try:
            self._grant_owner(root_path)
            workspace = Workspace(
                id=root_path.name.removeprefix(WORKSPACE_PREFIX),
                root_path=root_path,
                source_file=root_path / profile.source_filename,
                input_file=root_path / INPUT_FILENAME,
                output_file=root_path / OUTPUT_FILENAME,
            )
        except OSError as e:
            shutil.rmtree(root_path, ignore_errors=True)
            logger.error(f"Failed to hand workspace {root_path} to user {self.owner}: {e}")
            raise WorkspaceError(f"Failed to prepare workspace: {e}") from e
        except Exception:
            shutil.rmtree(root_path, ignore_errors=True)
            raise

        logger.debug(f"Acquired workspace {workspace.id} at {root_path}")
        return workspace

    async def _write(self, path: Path, content: str) -> None:
        try:
            async with aiofiles.open(path, "w", encoding="utf-8", newline="") as f:
                await f.write(content)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise WorkspaceError(f"Failed to write {path.name}: {e}") from e

    async def write_source(self, workspace: Workspace, content: str) -> None:
        """Writes the program source exactly as given."""
        await self._write(workspace.source_file, content)

    async def write_input(self, workspace: Workspace, content: str) -> None:
        """Writes the stdin payload exactly as given."""
        await self._write(workspace.input_file, content)

    async def read_output(self, workspace: Workspace, limit: int | None = None) -> str:
        """Reads the output artifact written by the sandboxed program.

        Args:
            workspace: The workspace the program ran in.
            limit: Maximum number of bytes to read.

        Returns:
            str: The output, decoded as UTF-8 with invalid bytes replaced.

        Raises:
            OutputNotFoundError: If the program never created the artifact.
            WorkspaceError: If the artifact exists but cannot be read.
        """
        try:
            async with aiofiles.open(workspace.output_file, "rb") as f:
                data = await f.read(-1 if limit is None else limit)
        except FileNotFoundError as e:
            raise OutputNotFoundError(f"No output produced in workspace {workspace.id}") from e
        except OSError as e:
            logger.error(f"Failed to read output of workspace {workspace.id}: {e}")
            raise WorkspaceError(f"Failed to read output: {e}") from e
        return data.decode("utf-8", errors="replace")

    async def release(self, workspace: Workspace) -> None:
        """Recursively deletes the workspace. A missing directory is not an error.

        Raises:
            WorkspaceError: If the directory exists but could not be removed.
        """

        def _remove() -> None:
            if workspace.root_path.exists():
                shutil.rmtree(workspace.root_path)

        try:
            await anyio.to_thread.run_sync(_remove)
        except OSError as e:
            logger.error(f"Failed to release workspace {workspace.id}: {e}")
            raise WorkspaceError(f"Failed to release workspace {workspace.id}: {e}") from e
        logger.debug(f"Released workspace {workspace.id}")

    @asynccontextmanager
    async def session(self, profile: LanguageProfile) -> AsyncIterator[Workspace]:
        """Scoped workspace: released on every exit path, including cancellation."""
        workspace = self.acquire(profile)
        try:
            yield workspace
        finally:
            with anyio.CancelScope(shield=True):
                await self.release(workspace)
