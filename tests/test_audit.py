import hashlib
from unittest.mock import patch

from coreason_judge.utils.audit import AuditIntegrator


def test_log_pre_execution_returns_hash() -> None:
    audit = AuditIntegrator(enabled=True)
    code = "print('hello')"

    with patch("coreason_judge.utils.audit.logger") as mock_logger:
        code_hash = audit.log_pre_execution(code, "python", "ws1")

    assert code_hash == hashlib.sha256(code.encode("utf-8")).hexdigest()
    message = mock_logger.bind.return_value.info.call_args.args[0]
    assert code_hash in message
    assert "ws1" in message
    assert code not in message


def test_disabled_audit_does_not_log() -> None:
    audit = AuditIntegrator(enabled=False)

    with patch("coreason_judge.utils.audit.logger") as mock_logger:
        code_hash = audit.log_pre_execution("x", "python", "ws1")

    assert len(code_hash) == 64
    mock_logger.bind.assert_not_called()
