from coreason_judge.config import JudgeConfig
from coreason_judge.runner import SandboxRunner
from coreason_judge.runners.docker import DockerRunner


class RunnerFactory:
    """
    Factory to create SandboxRunner instances based on configuration.
    """

    @staticmethod
    def get_runner(config: JudgeConfig) -> SandboxRunner:
        """
        Returns an instance of the configured SandboxRunner.
        """
        if config.runner == "docker":
            return DockerRunner(
                workdir=config.container_workdir,
                user=config.run_as_user,
                pull_missing_images=config.pull_missing_images,
                launch_timeout=config.launch_timeout,
            )
        else:
            # This should be unreachable due to Pydantic validation, but for safety:
            raise ValueError(f"Unknown runner: {config.runner}")  # pragma: no cover
