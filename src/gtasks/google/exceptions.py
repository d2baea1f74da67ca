"""Google authentication exceptions."""


class GoogleAuthError(Exception):
    """Base exception for Google authentication errors.

    Every subclass means the user has to re-authorize with 'gtasks login'.
    """

    pass


class CredentialsNotFoundError(GoogleAuthError):
    """Raised when a local credentials file is not found."""

    def __init__(self, path: str, what: str = "Credentials file"):
        self.path = path
        super().__init__(f"{what} not found at {path}.")


class TokenError(GoogleAuthError):
    """Raised when the stored token is unusable or cannot be refreshed."""

    pass


class ScopeMismatchError(GoogleAuthError):
    """Raised when token scopes don't match required scopes."""

    def __init__(self, missing_scopes: set[str]):
        self.missing_scopes = missing_scopes
        super().__init__(f"Token missing required scopes: {missing_scopes}")
