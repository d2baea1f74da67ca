"""Authorized HTTP transport for Google API clients.

The transport only signs requests with the access token it is given. It holds
no refresh token and no expiry: staleness is decided once by the
CredentialStore before the transport is built, and a token the server rejects
surfaces as an error instead of being refreshed behind the store's back.
"""

from __future__ import annotations

from typing import Any

import google_auth_httplib2
import httplib2
from google.oauth2.credentials import Credentials as GoogleCredentials
from googleapiclient.discovery import build

from gtasks.google.oauth import Credential


def authorized_http(credential: Credential, timeout: float) -> google_auth_httplib2.AuthorizedHttp:
    """Wrap an ``httplib2.Http`` with the credential's access token.

    Args:
        credential: A fresh credential.
        timeout: Per-request socket timeout in seconds.
    """
    google_credentials = GoogleCredentials(
        token=credential.access_token,
        scopes=list(credential.scopes),
    )
    return google_auth_httplib2.AuthorizedHttp(google_credentials, http=httplib2.Http(timeout=timeout))


def build_service(
    credential: Credential,
    service_name: str = "tasks",
    version: str = "v1",
    timeout: float = 30.0,
) -> Any:
    """Build a Google API service bound to one credential.

    Args:
        credential: A fresh credential.
        service_name: Name of the service (e.g., 'tasks').
        version: API version (e.g., 'v1').
        timeout: Per-request socket timeout in seconds.

    Returns:
        Google API service object.
    """
    return build(
        service_name,
        version,
        http=authorized_http(credential, timeout),
        cache_discovery=False,
        static_discovery=True,
    )


def build_tasks_service(credential: Credential, timeout: float = 30.0) -> Any:
    """Build a Google Tasks v1 service bound to one credential."""
    return build_service(credential, "tasks", "v1", timeout=timeout)
