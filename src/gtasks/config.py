"""Centralized configuration.

All local state lives in one directory (``~/.config/gtasks`` unless
``GTASKS_HOME`` says otherwise):
    .env              - optional settings (GTASKS_HTTP_TIMEOUT, GTASKS_LOG_LEVEL)
    credentials.json  - Google OAuth client credentials
    token.json        - OAuth tokens (created by 'gtasks login')

Settings are resolved once per invocation by ``load_settings`` and passed
down explicitly. Real environment variables take precedence over ``.env``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

DEFAULT_HOME = Path("~/.config/gtasks")
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for one invocation."""

    home: Path
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def env_file(self) -> Path:
        return self.home / ".env"

    @property
    def credentials_path(self) -> Path:
        return self.home / "credentials.json"

    @property
    def token_path(self) -> Path:
        return self.home / "token.json"


def _read_env_file(env_path: Path) -> dict[str, str]:
    """Read variables from a .env file.

    Args:
        env_path: Path to .env file.

    Returns:
        Dictionary of variables found in the file.
    """
    loaded: dict[str, str] = {}
    if not env_path.exists():
        return loaded

    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip()

            # Remove surrounding quotes
            if (value.startswith('"') and value.endswith('"')) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]

            if key:
                loaded[key] = value

    return loaded


def _parse_timeout(raw: str | None) -> float:
    if not raw:
        return DEFAULT_HTTP_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError as e:
        raise ValueError(f"GTASKS_HTTP_TIMEOUT must be a number of seconds, got {raw!r}") from e
    if timeout <= 0:
        raise ValueError(f"GTASKS_HTTP_TIMEOUT must be positive, got {raw!r}")
    return timeout


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Resolve settings from the environment and the optional .env file.

    Args:
        environ: Environment mapping. Defaults to ``os.environ``.

    Returns:
        Settings for this invocation.

    Raises:
        ValueError: If a setting has an invalid value.
    """
    environ = os.environ if environ is None else environ
    home = Path(environ.get("GTASKS_HOME") or DEFAULT_HOME).expanduser()

    values = _read_env_file(home / ".env")
    values.update({k: v for k, v in environ.items() if k.startswith("GTASKS_")})

    return Settings(
        home=home,
        http_timeout=_parse_timeout(values.get("GTASKS_HTTP_TIMEOUT")),
        log_level=(values.get("GTASKS_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
    )


def ensure_home(settings: Settings) -> Path:
    """Create the configuration directory if it doesn't exist.

    Returns:
        Path to the configuration directory.
    """
    settings.home.mkdir(parents=True, exist_ok=True)
    return settings.home


def get_credential_status(settings: Settings) -> dict:
    """Get status of the local credential files.

    Returns:
        Dictionary with credential status.
    """
    return {
        "home": str(settings.home),
        "env_file": settings.env_file.exists(),
        "credentials": settings.credentials_path.exists(),
        "token": settings.token_path.exists(),
    }
