import hashlib

from loguru import logger


class AuditIntegrator:
    """Audit logging of submissions.

    Records a SHA-256 hash and length of every submission before it runs, so a
    judged result can be tied back to the exact source without logging the
    source itself.
    """

    def __init__(self, service_name: str = "coreason-judge", enabled: bool = True):
        """Initializes the AuditIntegrator.

        Args:
            service_name: The name of the service (default: 'coreason-judge').
            enabled: Whether to enable audit logging.
        """
        self.service_name = service_name
        self.enabled = enabled
        if self.enabled:
            logger.info(f"Audit logging enabled for {service_name}")

    def log_pre_execution(self, code: str, language: str, workspace_id: str) -> str:
        """Log the execution attempt.

        Args:
            code: The submitted source code.
            language: The language id of the submission.
            workspace_id: The workspace the submission will run in.

        Returns:
            str: The SHA-256 hash of the code.
        """
        code_hash = hashlib.sha256(code.encode("utf-8")).hexdigest()
        if self.enabled:
            logger.bind(audit=True, service=self.service_name).info(
                f"AUDIT: Executing {language} code in workspace {workspace_id}. "
                f"Hash: {code_hash}, Length: {len(code)}"
            )
        return code_hash
