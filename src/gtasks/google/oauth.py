"""Google OAuth credential lifecycle using Authlib.

This module owns the only durable secret state of gtasks:
- Loading and validating the stored token
- Transparent refresh of stale tokens, persisted atomically
- The out-of-band authorization flow used by 'gtasks login'

The token file keeps the google-auth "authorized user" layout, so it can also
be read by ``google.oauth2.credentials.Credentials.from_authorized_user_file``.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import requests
from authlib.integrations.requests_client import OAuth2Session
from authlib.oauth2 import OAuth2Error

from gtasks.google.exceptions import (
    CredentialsNotFoundError,
    ScopeMismatchError,
    TokenError,
)

logger = logging.getLogger(__name__)


SCOPES = {
    "tasks": "https://www.googleapis.com/auth/tasks",
    "tasks_readonly": "https://www.googleapis.com/auth/tasks.readonly",
}
DEFAULT_SCOPES = (SCOPES["tasks"],)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
REVOKE_URL = "https://oauth2.googleapis.com/revoke"
REDIRECT_URI = "http://localhost"

# Tokens expiring within this window are refreshed ahead of time.
EXPIRY_SKEW = timedelta(minutes=5)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_expiry(value: Any) -> datetime | None:
    """Parse an expiry stored as ISO 8601 text or a POSIX timestamp."""
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass(frozen=True)
class Credential:
    """A stored OAuth authorization record."""

    access_token: str
    refresh_token: str | None
    expiry: datetime | None
    scopes: tuple[str, ...]
    client_id: str | None = None
    client_secret: str | None = None
    token_type: str = "Bearer"

    def is_stale(self, now: datetime | None = None) -> bool:
        """Check if the access token has expired (or is about to)."""
        if self.expiry is None:
            return False
        now = now or _utcnow()
        return self.expiry - EXPIRY_SKEW <= now

    def to_json(self) -> dict[str, Any]:
        """Serialize to the google-auth authorized user layout."""
        return {
            "token": self.access_token,
            "refresh_token": self.refresh_token,
            "token_uri": TOKEN_URL,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "scopes": list(self.scopes),
            "type": self.token_type,
            "expiry": self.expiry.isoformat().replace("+00:00", "Z") if self.expiry else None,
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Credential:
        """Build a credential from the stored JSON layout.

        Raises:
            TokenError: If the record has no access token or a bad expiry.
        """
        if not isinstance(data, dict) or not data.get("token"):
            raise TokenError("Token file has no access token")
        try:
            expiry = _parse_expiry(data.get("expiry"))
        except (TypeError, ValueError, OverflowError) as e:
            raise TokenError(f"Token file has an invalid expiry: {e}") from e

        scopes = data.get("scopes") or []
        if isinstance(scopes, str):
            scopes = scopes.split()

        return cls(
            access_token=data["token"],
            refresh_token=data.get("refresh_token"),
            expiry=expiry,
            scopes=tuple(scopes),
            client_id=data.get("client_id"),
            client_secret=data.get("client_secret"),
            token_type=data.get("type") or "Bearer",
        )

    @classmethod
    def from_oauth_token(
        cls,
        token: dict[str, Any],
        client_id: str | None,
        client_secret: str | None,
        previous: Credential | None = None,
    ) -> Credential:
        """Build a credential from an Authlib token response.

        Fields missing from the response (refresh token, scope) are carried
        over from ``previous``.
        """
        if not token.get("access_token"):
            raise TokenError("Token response has no access token")

        expiry = None
        if token.get("expires_at"):
            expiry = _parse_expiry(float(token["expires_at"]))
        elif token.get("expires_in"):
            expiry = _utcnow() + timedelta(seconds=int(token["expires_in"]))

        if token.get("scope"):
            scopes = tuple(token["scope"].split())
        else:
            scopes = previous.scopes if previous else ()

        refresh_token = token.get("refresh_token") or (previous.refresh_token if previous else None)

        return cls(
            access_token=token["access_token"],
            refresh_token=refresh_token,
            expiry=expiry,
            scopes=scopes,
            client_id=client_id,
            client_secret=client_secret,
            token_type=token.get("token_type") or "Bearer",
        )


def load_client_credentials(credentials_path: Path) -> tuple[str, str]:
    """Load OAuth client credentials from a client secrets file.

    Raises:
        CredentialsNotFoundError: If the file does not exist.
        ValueError: If the file is not a client secrets file.
    """
    if not credentials_path.exists():
        raise CredentialsNotFoundError(str(credentials_path), "OAuth client credentials")

    with open(credentials_path) as f:
        creds = json.load(f)

    # Handle both web and installed app credential formats
    if "installed" in creds:
        app_creds = creds["installed"]
    elif "web" in creds:
        app_creds = creds["web"]
    else:
        raise ValueError("Invalid credentials.json format. Expected 'installed' or 'web' key.")

    return app_creds["client_id"], app_creds["client_secret"]


class CredentialStore:
    """Loads, refreshes and persists the local OAuth token.

    Example:
        >>> store = CredentialStore(settings.token_path, settings.credentials_path)
        >>> credential = store.ensure_fresh(store.load())
    """

    def __init__(
        self,
        token_path: str | Path,
        credentials_path: str | Path | None = None,
        scopes: tuple[str, ...] = DEFAULT_SCOPES,
    ):
        self.token_path = Path(token_path)
        self.credentials_path = Path(credentials_path) if credentials_path else None
        self.required_scopes = tuple(scopes)

    def exists(self) -> bool:
        return self.token_path.exists()

    def load(self) -> Credential:
        """Load the stored credential.

        Raises:
            CredentialsNotFoundError: If no token has been stored yet.
            TokenError: If the token file is unreadable or corrupt.
            ScopeMismatchError: If the token lacks a required scope.
        """
        if not self.token_path.exists():
            raise CredentialsNotFoundError(str(self.token_path), "Token file")

        try:
            with open(self.token_path) as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise TokenError(f"Failed to read token file {self.token_path}: {e}") from e

        credential = Credential.from_json(data)
        self.check_scopes(credential.scopes)
        logger.debug(f"Loaded token with scopes: {set(credential.scopes)}")
        return credential

    def check_scopes(self, scopes: tuple[str, ...]) -> None:
        missing = set(self.required_scopes) - set(scopes)
        if missing:
            raise ScopeMismatchError(missing)

    def ensure_fresh(self, credential: Credential, now: datetime | None = None) -> Credential:
        """Return a usable credential, refreshing and persisting it if stale.

        A fresh credential is returned unchanged and nothing is written.

        Raises:
            TokenError: If the refresh is impossible or rejected. The stored
                token is left untouched.
        """
        if not credential.is_stale(now):
            return credential

        logger.info("Token expired, refreshing...")
        refreshed = self.refresh(credential)
        self.save(refreshed)
        return refreshed

    def refresh(self, credential: Credential) -> Credential:
        """Exchange the refresh token for a new access token.

        Raises:
            TokenError: If there is no refresh token, or the authorization
                server rejects the exchange, or it cannot be reached.
        """
        if not credential.refresh_token:
            raise TokenError("Token expired and no refresh token is stored")

        client_id, client_secret = self._client_credentials(credential)
        session = OAuth2Session(
            client_id=client_id,
            client_secret=client_secret,
            token_endpoint_auth_method="client_secret_post",
        )
        try:
            token = session.refresh_token(TOKEN_URL, refresh_token=credential.refresh_token)
        except OAuth2Error as e:
            raise TokenError(f"Failed to refresh token: {e}") from e
        except requests.RequestException as e:
            raise TokenError(f"Could not reach the authorization server: {e}") from e
        finally:
            session.close()

        refreshed = Credential.from_oauth_token(token, client_id, client_secret, previous=credential)
        self.check_scopes(refreshed.scopes)
        return refreshed

    def _client_credentials(self, credential: Credential) -> tuple[str, str]:
        if credential.client_id and credential.client_secret:
            return credential.client_id, credential.client_secret
        if self.credentials_path is None:
            raise TokenError("Token has no client credentials and no credentials.json is configured")
        try:
            return load_client_credentials(self.credentials_path)
        except (CredentialsNotFoundError, OSError, ValueError, KeyError) as e:
            raise TokenError(f"Failed to load OAuth client credentials: {e}") from e

    def save(self, credential: Credential) -> None:
        """Overwrite the stored token atomically."""
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.token_path.parent, prefix=f".{self.token_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(credential.to_json(), f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.token_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(f"Token saved with scopes: {set(credential.scopes)}")

    def delete(self) -> bool:
        """Remove the stored token. Returns True if a file was removed."""
        if not self.token_path.exists():
            return False
        self.token_path.unlink()
        return True

    def get_token_info(self, now: datetime | None = None) -> dict[str, Any]:
        """Get information about the stored token.

        Returns:
            Dictionary with token status, scopes, expiry, etc.
        """
        try:
            credential = self.load()
        except CredentialsNotFoundError:
            return {"status": "no_token"}
        except (TokenError, ScopeMismatchError) as e:
            return {"status": "invalid", "error": str(e)}

        now = now or _utcnow()
        if credential.expiry:
            expires_in = (credential.expiry - now).total_seconds()
            expires_str = str(timedelta(seconds=max(0, int(expires_in))))
        else:
            expires_str = "unknown"

        return {
            "status": "expired" if credential.is_stale(now) else "valid",
            "scopes": list(credential.scopes),
            "expires_in": expires_str,
            "has_refresh_token": bool(credential.refresh_token),
        }


class GoogleOAuth:
    """Out-of-band OAuth authorization flow.

    Example:
        >>> auth = GoogleOAuth(store)
        >>> url = auth.get_authorization_url()
        >>> print(f"Visit: {url}")
        >>> auth.fetch_token(input("Paste redirect URL: "))
    """

    def __init__(self, store: CredentialStore):
        """Initialize the flow.

        Raises:
            CredentialsNotFoundError: If the store has no client credentials file.
        """
        if store.credentials_path is None:
            raise CredentialsNotFoundError("credentials.json", "OAuth client credentials")

        self.store = store
        self.client_id, self.client_secret = load_client_credentials(store.credentials_path)
        self.session = OAuth2Session(
            client_id=self.client_id,
            client_secret=self.client_secret,
            scope=" ".join(store.required_scopes),
            redirect_uri=REDIRECT_URI,
        )

    def get_authorization_url(self) -> str:
        """Start OAuth authorization flow.

        Returns:
            Authorization URL for user to visit.
        """
        authorization_url, _state = self.session.create_authorization_url(
            AUTHORIZE_URL,
            access_type="offline",
            prompt="consent",
            include_granted_scopes="true",
        )
        return authorization_url

    def fetch_token(self, authorization_response: str) -> Credential:
        """Complete authorization flow and persist the token.

        Args:
            authorization_response: The full redirect URL from OAuth callback.

        Raises:
            TokenError: If the code exchange fails.
            ScopeMismatchError: If the user did not grant the required scopes.
        """
        try:
            token = self.session.fetch_token(
                TOKEN_URL,
                authorization_response=authorization_response,
                client_secret=self.client_secret,
            )
        except (OAuth2Error, requests.RequestException) as e:
            raise TokenError(f"Failed to fetch token: {e}") from e

        credential = Credential.from_oauth_token(token, self.client_id, self.client_secret)
        self.store.check_scopes(credential.scopes)
        self.store.save(credential)
        return credential

    def revoke(self) -> bool:
        """Revoke the stored token and clear local storage.

        Returns:
            True if a stored token was removed.
        """
        try:
            credential = self.store.load()
        except (CredentialsNotFoundError, TokenError, ScopeMismatchError) as e:
            logger.warning(f"No usable token to revoke: {e}")
            return self.store.delete()

        token = credential.refresh_token or credential.access_token
        try:
            self.session.post(
                REVOKE_URL, params={"token": token}, withhold_token=True, timeout=30
            )
        except requests.RequestException as e:
            logger.warning(f"Failed to revoke token remotely: {e}")

        removed = self.store.delete()
        logger.info("Token revoked")
        return removed
