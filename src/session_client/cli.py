# src/session_client/cli.py

import sys
import json
import asyncio
import logging
import argparse
from typing import List, Optional

import httpx
from rich.console import Console
from rich.panel import Panel

from .client import AuthenticatedClient
from .config import ClientConfig
from .credential_store import CredentialStore
from .errors import RefreshFailedError, mask_credential
from .logging_setup import configure_logging

console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="session-client",
        description="Authenticated client for the admin backend API",
    )
    parser.add_argument("--env-file", help="Load settings from this .env file.")
    parser.add_argument(
        "--verbose", action="store_true", help="Show debug logs on the console."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("status", help="Show the stored session.")
    subparsers.add_parser("logout", help="Clear the stored credentials.")

    request_parser = subparsers.add_parser(
        "request", help="Perform an authenticated API call."
    )
    request_parser.add_argument("method", help="HTTP method, e.g. GET")
    request_parser.add_argument("path", help="Path relative to the API base URL")
    request_parser.add_argument("--data", help="JSON request body.")
    return parser


def _show_status(config: ClientConfig) -> int:
    # Read-only: environment credentials are shown but never written to disk
    pair = CredentialStore(config.credentials_file).get()
    source = config.credentials_file or "in memory"
    if pair is None:
        pair = CredentialStore.from_env().get()
        if pair is not None:
            source = "environment"
    lines = [
        f"API base URL:   {config.base_url}",
        f"Refresh URL:    {config.refresh_url}",
        f"Credentials:    {source}",
    ]
    if pair is None:
        lines.append("Session:        [yellow]not authenticated[/yellow]")
    else:
        lines.append("Session:        [green]authenticated[/green]")
        lines.append(f"Access token:   {mask_credential(pair.access_token)}")
        lines.append(f"Refresh token:  {mask_credential(pair.refresh_token)}")
    console.print(Panel("\n".join(lines), title="Session", expand=False))
    return 0


def _on_session_expired(reason: Optional[Exception]) -> None:
    console.print(
        Panel(
            f"[red]Session expired: {reason}[/red]\nPlease log in again.",
            title="Re-authentication required",
            expand=False,
        )
    )


async def _perform_request(config: ClientConfig, args: argparse.Namespace) -> int:
    body = None
    if args.data:
        try:
            body = json.loads(args.data)
        except ValueError as e:
            console.print(f"[red]--data is not valid JSON: {e}[/red]")
            return 2

    async with AuthenticatedClient(
        config, on_session_expired=_on_session_expired
    ) as client:
        try:
            response = await client.request(args.method, args.path, json=body)
        except RefreshFailedError as e:
            console.print(f"[red]Refresh failed: {e.message}[/red]")
            return 1
        except httpx.HTTPStatusError as e:
            console.print(
                f"[red]HTTP {e.response.status_code}[/red] {e.response.text[:500]}"
            )
            return 1
        except httpx.TransportError as e:
            console.print(f"[red]Network error: {type(e).__name__}: {e}[/red]")
            return 1

    console.print(f"[green]HTTP {response.status_code}[/green]")
    try:
        console.print_json(data=response.json())
    except ValueError:
        console.print(response.text)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(
        console_level=logging.DEBUG if args.verbose else logging.WARNING,
        log_to_files=False,
    )
    config = ClientConfig.from_env(args.env_file)

    if args.command == "status":
        return _show_status(config)
    if args.command == "logout":
        CredentialStore(config.credentials_file).clear()
        console.print("[green]Stored credentials cleared.[/green]")
        return 0
    return asyncio.run(_perform_request(config, args))


if __name__ == "__main__":
    sys.exit(main())
