import asyncio
import os
import threading
import time

import anyio
import docker
from docker.errors import DockerException, ImageNotFound
from docker.models.containers import Container
from docker.types import Ulimit
from loguru import logger
from requests.exceptions import RequestException

from coreason_judge.exceptions import SandboxUnavailableError
from coreason_judge.languages import LanguageProfile
from coreason_judge.models import RawRunResult, ResourceLimits, Workspace
from coreason_judge.runner import SandboxRunner

KILL_GRACE_SECONDS = 5.0
NOBODY_USER = "65534:65534"
WORKSPACE_LABEL = "coreason-judge.workspace"

# docker-py reports a dropped engine connection as a requests error, not a DockerException
ENGINE_ERRORS = (DockerException, RequestException)


def default_user() -> str | None:
    """Host uid:gid, so files in the bind-mounted workspace stay writable.

    A service running as root hands the sandbox ``nobody`` instead.
    """
    if not hasattr(os, "getuid"):
        return None  # pragma: no cover
    if os.getuid() == 0:
        return NOBODY_USER
    return f"{os.getuid()}:{os.getgid()}"


class _LaunchHandoff:
    """Passes a started container from the launch thread to the waiting task.

    Once the task gives up (deadline or cancellation) the thread removes any
    container it starts afterwards; a container started before that is
    returned by ``abandon`` for the task to remove.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._abandoned = False
        self._container: Container | None = None

    def deliver(self, container: Container) -> bool:
        with self._lock:
            if self._abandoned:
                return False
            self._container = container
            return True

    def abandon(self) -> Container | None:
        with self._lock:
            self._abandoned = True
            return self._container


class DockerRunner(SandboxRunner):
    """
    Docker-based implementation of the SandboxRunner.

    Each run gets its own short-lived container with no network, bounded
    memory, CPU, process count and file size, no capabilities, and the
    workspace bind-mounted at ``workdir``.
    """

    def __init__(
        self,
        workdir: str = "/sandbox",
        user: str | None = None,
        pull_missing_images: bool = True,
        launch_timeout: float = 300.0,
    ):
        self.workdir = workdir
        self.user = user or default_user()
        self.pull_missing_images = pull_missing_images
        self.launch_timeout = launch_timeout
        self._client: docker.DockerClient | None = None

    @property
    def client(self) -> docker.DockerClient:
        if self._client is None:
            try:
                self._client = docker.from_env()
            except DockerException as e:
                logger.error(f"Docker engine unreachable: {e}")
                raise SandboxUnavailableError(f"Docker engine unreachable: {e}") from e
        return self._client

    def _ensure_image(self, image: str) -> None:
        try:
            self.client.images.get(image)
        except ImageNotFound:
            if not self.pull_missing_images:
                raise
            logger.info(f"Pulling missing image {image}")
            self.client.images.pull(image)

    def _launch(
        self,
        workspace: Workspace,
        profile: LanguageProfile,
        limits: ResourceLimits,
        handoff: _LaunchHandoff,
    ) -> Container:
        self._ensure_image(profile.container_image)
        mem_limit = f"{limits.memory_limit_mb}m"
        container = self.client.containers.run(
            profile.container_image,
            command=profile.render_command(),
            name=f"judge-{workspace.id}",
            labels={WORKSPACE_LABEL: workspace.id},
            detach=True,
            network_mode="none",
            mem_limit=mem_limit,
            memswap_limit=mem_limit,
            nano_cpus=int(limits.cpu_limit * 1e9),
            pids_limit=limits.pids_limit,
            ulimits=[Ulimit(name="fsize", soft=limits.output_limit_bytes, hard=limits.output_limit_bytes)],
            cap_drop=["ALL"],
            security_opt=["no-new-privileges"],
            user=self.user,
            environment={"HOME": self.workdir},
            volumes={str(workspace.root_path): {"bind": self.workdir, "mode": "rw"}},
            working_dir=self.workdir,
        )
        if not handoff.deliver(container):
            logger.warning(f"Container {container.short_id} started after its run was abandoned. Removing.")
            self._remove_sync(container)
        return container

    async def _start(self, workspace: Workspace, profile: LanguageProfile, limits: ResourceLimits) -> Container:
        """Launch the container, pulling its image if needed, within ``launch_timeout``."""
        handoff = _LaunchHandoff()
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._launch, workspace, profile, limits, handoff),
                timeout=self.launch_timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Sandbox for workspace {workspace.id} did not start within {self.launch_timeout}s")
            await self._abandon(handoff)
            raise SandboxUnavailableError(f"Sandbox did not start within {self.launch_timeout}s") from e
        except asyncio.CancelledError:
            await self._abandon(handoff)
            raise
        except ENGINE_ERRORS as e:
            logger.error(f"Failed to start container for workspace {workspace.id}: {e}")
            raise SandboxUnavailableError(f"Failed to start sandbox: {e}") from e

    async def _abandon(self, handoff: _LaunchHandoff) -> None:
        container = handoff.abandon()
        if container is not None:
            await self._remove(container)

    async def _kill(self, container: Container) -> int:
        """Kill the container's whole process tree and wait for it to stop."""
        try:
            await asyncio.to_thread(container.kill)
        except ENGINE_ERRORS as e:
            # Already exited between the deadline and the kill
            logger.warning(f"Kill of container {container.short_id} failed: {e}")
        try:
            status = await asyncio.wait_for(asyncio.to_thread(container.wait), timeout=KILL_GRACE_SECONDS)
        except (asyncio.TimeoutError, *ENGINE_ERRORS) as e:
            logger.error(f"Container {container.short_id} did not stop after kill: {e!r}")
            return -1
        return int(status.get("StatusCode", -1))

    def _remove_sync(self, container: Container) -> None:
        try:
            container.remove(force=True)
        except ENGINE_ERRORS as e:
            logger.warning(f"Error removing container {container.short_id}: {e}")

    async def _remove(self, container: Container) -> None:
        # Forced removal also kills a container left running by cancellation
        with anyio.CancelScope(shield=True):
            await anyio.to_thread.run_sync(self._remove_sync, container)

    async def run(self, workspace: Workspace, profile: LanguageProfile, limits: ResourceLimits) -> RawRunResult:
        """
        Run the workspace's program in a fresh container and capture its streams.
        """
        logger.info(f"Running {profile.id} in {profile.container_image} for workspace {workspace.id}")

        container = await self._start(workspace, profile, limits)

        start_time = time.monotonic()
        timed_out = False
        try:
            try:
                status = await asyncio.wait_for(asyncio.to_thread(container.wait), timeout=limits.time_limit)
                exit_code = int(status.get("StatusCode", -1))
            except asyncio.TimeoutError:
                logger.warning(
                    f"Execution timed out ({limits.time_limit}s). Killing container {container.short_id}."
                )
                timed_out = True
                exit_code = await self._kill(container)

            duration = time.monotonic() - start_time

            stdout_bytes = await asyncio.to_thread(container.logs, stdout=True, stderr=False)
            stderr_bytes = await asyncio.to_thread(container.logs, stdout=False, stderr=True)
        except ENGINE_ERRORS as e:
            logger.error(f"Lost track of container {container.short_id}: {e}")
            raise SandboxUnavailableError(f"Sandbox failed during execution: {e}") from e
        finally:
            await self._remove(container)

        return RawRunResult(
            exit_code=exit_code,
            stdout=stdout_bytes.decode("utf-8", errors="replace") if stdout_bytes else "",
            stderr=stderr_bytes.decode("utf-8", errors="replace") if stderr_bytes else "",
            timed_out=timed_out,
            duration=duration,
        )
