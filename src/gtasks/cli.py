"""CLI for gtasks - Google Tasks from the terminal.

Usage:
    gtasks login                  # Interactive OAuth login
    gtasks status                 # Show OAuth token status
    gtasks logout                 # Revoke OAuth token and delete it locally
    gtasks import <path>          # Import OAuth client credentials
    gtasks lists                  # Show task lists
    gtasks view [-i]              # View tasks in a task list
    gtasks add                    # Add a task to a task list
    gtasks done                   # Mark a task as completed
    gtasks rm                     # Delete a task
"""

from __future__ import annotations

import argparse
import json
import logging
import shutil
import sys
import webbrowser
from pathlib import Path

from gtasks import __version__
from gtasks.config import Settings, ensure_home, get_credential_status, load_settings

logger = logging.getLogger(__name__)


def _store(settings: Settings):
    from gtasks.google import CredentialStore

    return CredentialStore(settings.token_path, settings.credentials_path)


def cmd_login(settings: Settings, no_browser: bool = False) -> int:
    """Interactive Google OAuth login."""
    from gtasks.google import CredentialsNotFoundError, GoogleAuthError, GoogleOAuth

    print("=" * 60)
    print("GTASKS GOOGLE LOGIN")
    print("=" * 60)

    store = _store(settings)

    # Check if already authorized AND token is valid
    info = store.get_token_info()
    if info["status"] == "valid":
        print("\nAlready authorized with valid token")
        return cmd_status(settings)

    if info["status"] == "expired":
        print("\nToken expired, attempting refresh...")
        try:
            store.ensure_fresh(store.load())
            print("Token refreshed successfully!")
            return cmd_status(settings)
        except GoogleAuthError as e:
            print(f"Refresh failed: {e}")
            print("Starting new authorization flow...")

    try:
        auth = GoogleOAuth(store)
    except CredentialsNotFoundError as e:
        print(f"\nError: {e}")
        print("Download OAuth credentials from https://console.cloud.google.com/apis/credentials")
        print("and run 'gtasks import <path>'")
        return 1
    except (ValueError, KeyError) as e:
        print(f"\nError: invalid OAuth client credentials: {e}")
        return 1

    print("\nA browser window will open for Google consent.")
    print("After granting access, copy the redirect URL back here.\n")

    url = auth.get_authorization_url()
    print(f"Authorization URL:\n{url}\n")

    if not no_browser:
        webbrowser.open(url)

    try:
        redirect_url = input("Paste redirect URL: ").strip()
    except (EOFError, KeyboardInterrupt):
        print()
        redirect_url = ""
    if not redirect_url:
        print("No URL provided; aborting.")
        return 1

    try:
        auth.fetch_token(redirect_url)
    except GoogleAuthError as e:
        print(f"\nError: {e}")
        return 1

    print("\nToken saved successfully!")
    return cmd_status(settings)


def cmd_status(settings: Settings) -> int:
    """Show Google OAuth token status."""
    status = get_credential_status(settings)
    info = _store(settings).get_token_info()

    print(f"Config dir : {status['home']}")
    print(f"Client     : {'[x]' if status['credentials'] else '[ ]'} credentials.json")

    if info["status"] == "no_token":
        print("No token found - run 'gtasks login'")
        return 1
    if info["status"] == "invalid":
        print(f"Token is unusable: {info['error']}")
        print("Run 'gtasks login' to authorize again")
        return 1

    print(f"Status     : {info['status']}")
    print(f"Scopes     : {', '.join(info.get('scopes', []))}")
    print(f"Expires in : {info.get('expires_in', 'unknown')}")
    print(f"Refreshable: {'yes' if info.get('has_refresh_token') else 'no'}")
    return 0


def cmd_logout(settings: Settings) -> int:
    """Revoke the OAuth token and delete it locally."""
    from gtasks.google import GoogleAuthError, GoogleOAuth

    store = _store(settings)
    if not store.exists():
        print("No token to revoke")
        return 0

    try:
        removed = GoogleOAuth(store).revoke()
    except (GoogleAuthError, OSError, ValueError, KeyError) as e:
        # No usable client credentials; the local token can still go.
        logger.warning(f"Skipping remote revocation: {e}")
        removed = store.delete()

    if removed:
        print("Token revoked and local copy deleted")
    return 0


def cmd_import(settings: Settings, source_path: str) -> int:
    """Import OAuth client credentials from a file."""
    source = Path(source_path).expanduser()

    if not source.exists():
        print(f"Error: File not found: {source}")
        return 1

    # Validate JSON format
    try:
        with open(source) as f:
            data = json.load(f)

        if "installed" not in data and "web" not in data:
            print("Error: Invalid OAuth credentials format")
            print("Expected 'installed' or 'web' key in JSON")
            return 1

        key = "installed" if "installed" in data else "web"
        client_id = data[key].get("client_id", "unknown")

    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON: {e}")
        return 1

    ensure_home(settings)
    shutil.copy2(source, settings.credentials_path)
    settings.credentials_path.chmod(0o600)

    print("Imported OAuth credentials")
    print(f"  From: {source}")
    print(f"  To:   {settings.credentials_path}")
    print(f"  Client ID: {client_id[:40]}...")
    print()
    print("Next: Run 'gtasks login' to authorize")
    return 0


def _task_command(settings: Settings, args: argparse.Namespace) -> int:
    from gtasks import commands

    ctx = commands.CommandContext(
        store=_store(settings),
        make_client=commands.default_client_factory(settings.http_timeout),
    )

    if args.command == "lists":
        return commands.list_task_lists(ctx)
    if args.command == "view":
        return commands.view_tasks(ctx, include_completed=args.include_completed)
    if args.command == "add":
        return commands.add_task(ctx)
    if args.command == "done":
        return commands.complete_task(ctx)
    if args.command == "rm":
        return commands.remove_task(ctx)
    raise ValueError(f"Unknown command: {args.command}")


def _setup_logging(level: str) -> None:
    level_no = getattr(logging, level, None)
    if not isinstance(level_no, int):
        level_no = logging.WARNING
    logging.basicConfig(
        level=level_no,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    # Keep third-party request logs quiet unless debugging.
    if level != "DEBUG":
        for name in ("googleapiclient", "google_auth_httplib2", "authlib", "urllib3"):
            logging.getLogger(name).setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gtasks",
        description="View, create, complete and delete Google Tasks",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    # login command
    login_parser = subparsers.add_parser("login", help="Interactive OAuth login")
    login_parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Don't open browser automatically",
    )

    subparsers.add_parser("status", help="Show token status")
    subparsers.add_parser("logout", help="Revoke token and delete it locally")

    import_parser = subparsers.add_parser("import", help="Import OAuth client credentials")
    import_parser.add_argument("path", help="Path to credentials.json file")

    subparsers.add_parser("lists", help="Show task lists")

    view_parser = subparsers.add_parser("view", help="View tasks in a tasklist")
    view_parser.add_argument(
        "-i",
        "--include-completed",
        action="store_true",
        help="Include completed tasks",
    )
    subparsers.add_parser("add", help="Add task in a tasklist")
    subparsers.add_parser("done", help="Mark a task as done")
    subparsers.add_parser("rm", help="Delete a task in a tasklist")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        settings = load_settings()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _setup_logging("DEBUG" if args.verbose else settings.log_level)

    try:
        if args.command == "login":
            return cmd_login(settings, args.no_browser)
        if args.command == "status":
            return cmd_status(settings)
        if args.command == "logout":
            return cmd_logout(settings)
        if args.command == "import":
            return cmd_import(settings, args.path)
        return _task_command(settings, args)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
