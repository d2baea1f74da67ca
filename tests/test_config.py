"""Tests for configuration loading."""

import os

import pytest

from gtasks.config import (
    DEFAULT_HTTP_TIMEOUT,
    ensure_home,
    get_credential_status,
    load_settings,
)


class TestLoadSettings:
    """Test settings resolution."""

    def test_defaults(self, tmp_path):
        settings = load_settings({"GTASKS_HOME": str(tmp_path)})
        assert settings.home == tmp_path
        assert settings.http_timeout == DEFAULT_HTTP_TIMEOUT
        assert settings.log_level == "WARNING"
        assert settings.token_path == tmp_path / "token.json"
        assert settings.credentials_path == tmp_path / "credentials.json"

    def test_reads_env_file(self, tmp_path):
        """Should read settings from .env, stripping quotes and comments."""
        (tmp_path / ".env").write_text(
            "# gtasks settings\nGTASKS_HTTP_TIMEOUT='12.5'\n\nGTASKS_LOG_LEVEL=\"info\"\nnoise\n"
        )
        settings = load_settings({"GTASKS_HOME": str(tmp_path)})
        assert settings.http_timeout == 12.5
        assert settings.log_level == "INFO"

    def test_environment_wins_over_env_file(self, tmp_path):
        (tmp_path / ".env").write_text("GTASKS_HTTP_TIMEOUT=12\n")
        settings = load_settings({"GTASKS_HOME": str(tmp_path), "GTASKS_HTTP_TIMEOUT": "5"})
        assert settings.http_timeout == 5.0

    @pytest.mark.parametrize("value", ["soon", "0", "-3"])
    def test_invalid_timeout(self, tmp_path, value):
        with pytest.raises(ValueError, match="GTASKS_HTTP_TIMEOUT"):
            load_settings({"GTASKS_HOME": str(tmp_path), "GTASKS_HTTP_TIMEOUT": value})

    def test_does_not_touch_process_environment(self, tmp_path, monkeypatch):
        monkeypatch.delenv("GTASKS_LOG_LEVEL", raising=False)
        (tmp_path / ".env").write_text("GTASKS_LOG_LEVEL=DEBUG\n")
        load_settings({"GTASKS_HOME": str(tmp_path)})
        assert "GTASKS_LOG_LEVEL" not in os.environ


class TestCredentialStatus:
    def test_reports_files(self, tmp_path):
        settings = load_settings({"GTASKS_HOME": str(tmp_path / "home")})
        ensure_home(settings)
        settings.token_path.write_text("{}")

        status = get_credential_status(settings)

        assert status["token"] is True
        assert status["credentials"] is False
        assert status["env_file"] is False
