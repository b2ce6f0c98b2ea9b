"""CLI entry point and argument parsing"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console

import settings
from cli.display import show_accounts, show_authentication_result
from token_cache import FileCachePlugin, InMemoryTokenCache
from token_response import (
    Authority,
    AuthorityType,
    AuthError,
    CommitOrchestrator,
    DefaultCrypto,
    ProtocolMode,
    ResponseHandler,
)


console = Console()
logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False):
    """Configure the root logger from --debug or LOG_LEVEL"""
    level = logging.DEBUG if debug else getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    root_logger.addHandler(console_handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Token response processing CLI")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--cache-file",
        default=None,
        help="Token cache file (default: TOKEN_CACHE_FILE from config)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    process = subparsers.add_parser("process", help="Process a token endpoint JSON response into the cache")
    process.add_argument("response_file", help="Path to the token response JSON")
    process.add_argument("--authority", default=settings.AUTHORITY, help="Authority URL the request was sent to")
    process.add_argument(
        "--authority-type",
        choices=[t.value for t in AuthorityType],
        default=AuthorityType.AAD.value,
        help="Authority type (default: AAD)"
    )
    process.add_argument(
        "--protocol-mode",
        choices=[m.value for m in ProtocolMode],
        default=ProtocolMode.AAD.value,
        help="Protocol mode (default: AAD)"
    )
    process.add_argument("--client-id", default=settings.CLIENT_ID, help="Client ID (default: CLIENT_ID from config)")
    process.add_argument("--nonce", default=None, help="Nonce sent with the request")
    process.add_argument("--state", default=None, help="State sent with the request")
    process.add_argument("--scopes", nargs="*", default=None, help="Scopes of the original request")
    process.add_argument("--obo-assertion", default=None, help="On-behalf-of assertion")
    process.add_argument("--refresh", action="store_true", help="Response came from a silent refresh")
    process.add_argument("--method", default=None, help="HTTP method for proof-of-possession tokens")
    process.add_argument("--uri", default=None, help="Resource URI for proof-of-possession tokens")
    process.add_argument("--signing-key", default=None, help="Path to a private JWK for proof-of-possession signing")

    subparsers.add_parser("accounts", help="List cached accounts")

    remove = subparsers.add_parser("remove-account", help="Remove a cached account and its tokens")
    remove.add_argument("account_key", help="Account key as shown by 'accounts'")

    return parser


async def run_process(args: argparse.Namespace, cache: InMemoryTokenCache, plugin: FileCachePlugin):
    """Validate a token response file and run it through the pipeline"""
    response = json.loads(Path(args.response_file).read_text())

    signing_key: Optional[str] = None
    if args.signing_key:
        signing_key = Path(args.signing_key).read_text()

    handler = ResponseHandler(
        client_id=args.client_id,
        cache_storage=cache,
        crypto=DefaultCrypto(signing_key=signing_key),
        serializable_cache=cache,
        persistence_plugin=plugin,
    )
    authority = Authority(
        canonical_authority=args.authority,
        authority_type=AuthorityType(args.authority_type),
        protocol_mode=ProtocolMode(args.protocol_mode),
    )

    handler.validate_token_response(response)
    result = await handler.handle_server_token_response(
        response,
        authority,
        resource_request_method=args.method,
        resource_request_uri=args.uri,
        cached_nonce=args.nonce,
        cached_state=args.state,
        request_scopes=args.scopes,
        obo_assertion=args.obo_assertion,
        handling_refresh_token_response=args.refresh,
    )
    show_authentication_result(result, console)


async def run_accounts(cache: InMemoryTokenCache, plugin: FileCachePlugin):
    orchestrator = CommitOrchestrator(cache, plugin, cache)
    async with orchestrator.persistence_scope(has_changed=False):
        accounts = cache.get_all_accounts()
    show_accounts(accounts, console)


async def run_remove_account(args: argparse.Namespace, cache: InMemoryTokenCache, plugin: FileCachePlugin):
    orchestrator = CommitOrchestrator(cache, plugin, cache)
    async with orchestrator.persistence_scope(has_changed=True):
        removed = cache.remove_account(args.account_key)

    if removed:
        console.print(f"[green]✓ Removed account {args.account_key}[/green]")
    else:
        console.print(f"[yellow]No cached account {args.account_key}[/yellow]")


def main(argv=None):
    """Entry point for the CLI"""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.debug)
    logger.debug(f"Running command: {args.command}")

    cache = InMemoryTokenCache()
    plugin = FileCachePlugin(args.cache_file)

    try:
        if args.command == "process":
            asyncio.run(run_process(args, cache, plugin))
        elif args.command == "accounts":
            asyncio.run(run_accounts(cache, plugin))
        elif args.command == "remove-account":
            asyncio.run(run_remove_account(args, cache, plugin))
    except AuthError as e:
        console.print(f"[red]ERROR:[/red] {e}")
        sys.exit(1)
    except (OSError, ValueError) as e:
        console.print(f"[red]ERROR:[/red] {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")


if __name__ == "__main__":
    main()
