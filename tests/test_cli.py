"""
Command-line Tool Tests
"""

import pytest

from session_client import cli
from session_client.credential_store import CredentialPair, CredentialStore


@pytest.fixture
def creds_file(tmp_path, monkeypatch):
    path = tmp_path / "credentials.json"
    monkeypatch.setenv("SESSION_CREDENTIALS_FILE", str(path))
    monkeypatch.delenv("SESSION_ACCESS_TOKEN", raising=False)
    monkeypatch.delenv("SESSION_REFRESH_TOKEN", raising=False)
    # Keep the root logger free of handlers bound to captured streams
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)
    return path


class TestCli:
    def test_status_masks_tokens(self, creds_file, capsys):
        CredentialStore(creds_file).set(
            CredentialPair("access-0123456789", "refresh-9876543210")
        )

        assert cli.main(["status"]) == 0

        out = capsys.readouterr().out
        assert "authenticated" in out
        assert "not authenticated" not in out
        assert "...456789" in out
        assert "access-0123456789" not in out

    def test_logout_clears_file(self, creds_file, capsys):
        CredentialStore(creds_file).set(CredentialPair("T1", "R1"))

        assert cli.main(["logout"]) == 0

        assert not creds_file.exists()
        assert "cleared" in capsys.readouterr().out

    def test_request_rejects_invalid_json(self, creds_file, capsys):
        assert cli.main(["request", "POST", "/users", "--data", "{oops"]) == 2
        assert "not valid JSON" in capsys.readouterr().out

    def test_status_does_not_persist_environment_tokens(
        self, creds_file, monkeypatch, capsys
    ):
        monkeypatch.setenv("SESSION_ACCESS_TOKEN", "env-access-123456")
        monkeypatch.setenv("SESSION_REFRESH_TOKEN", "env-refresh-654321")

        assert cli.main(["status"]) == 0

        out = capsys.readouterr().out
        assert "environment" in out
        assert "...123456" in out
        assert not creds_file.exists()
