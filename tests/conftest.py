"""Shared fixtures for gtasks tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from gtasks.google.oauth import SCOPES

CLIENT_ID = "test-client-id.apps.googleusercontent.com"
CLIENT_SECRET = "test-client-secret"


@pytest.fixture
def client_secrets(tmp_path: Path) -> Path:
    """Create a mock OAuth client credentials file."""
    creds = {
        "installed": {
            "client_id": CLIENT_ID,
            "client_secret": CLIENT_SECRET,
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": ["http://localhost"],
        }
    }
    creds_path = tmp_path / "credentials.json"
    creds_path.write_text(json.dumps(creds))
    return creds_path


@pytest.fixture
def write_token(tmp_path: Path):
    """Return a helper that writes a token file and returns its path."""

    def _write(expiry: str | None = "2099-01-01T00:00:00Z", **overrides) -> Path:
        token = {
            "token": "test-access-token",
            "refresh_token": "test-refresh-token",
            "token_uri": "https://oauth2.googleapis.com/token",
            "client_id": CLIENT_ID,
            "client_secret": CLIENT_SECRET,
            "scopes": [SCOPES["tasks"]],
            "type": "Bearer",
            "expiry": expiry,
        }
        token.update(overrides)
        token_path = tmp_path / "token.json"
        token_path.write_text(json.dumps(token))
        return token_path

    return _write
