"""Google OAuth and API authentication utilities."""

from gtasks.google.exceptions import (
    CredentialsNotFoundError,
    GoogleAuthError,
    ScopeMismatchError,
    TokenError,
)
from gtasks.google.oauth import Credential, CredentialStore, GoogleOAuth
from gtasks.google.transport import build_tasks_service

__all__ = [
    "Credential",
    "CredentialStore",
    "GoogleOAuth",
    "build_tasks_service",
    "GoogleAuthError",
    "CredentialsNotFoundError",
    "TokenError",
    "ScopeMismatchError",
]
