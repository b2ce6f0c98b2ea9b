"""Rich table rendering for CLI output"""

from typing import List, Optional

from rich.console import Console
from rich.table import Table

from token_response.entities import AccountEntity
from token_response.result import AuthenticationResult


def _redact(secret: str, keep: int = 8) -> str:
    """Show only the start of a secret"""
    if not secret:
        return "-"
    if len(secret) <= keep:
        return "[REDACTED]"
    return f"{secret[:keep]}... ({len(secret)} chars)"


def show_authentication_result(result: Optional[AuthenticationResult], console: Console):
    """
    Display an authentication result

    Args:
        result: Result from the response handler, or None if the write was skipped
        console: Rich console for output
    """
    if result is None:
        console.print("[yellow]Account was removed during refresh; tokens were not cached[/yellow]")
        return

    table = Table(title="Authentication Result")
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    table.add_row("Unique ID", result.unique_id or "-")
    table.add_row("Tenant ID", result.tenant_id or "-")
    table.add_row("Scopes", " ".join(result.scopes) or "-")
    table.add_row("Token Type", result.token_type or "-")
    table.add_row("Access Token", _redact(result.access_token))
    table.add_row("ID Token", _redact(result.id_token))
    table.add_row("Expires On", result.expires_on.isoformat() if result.expires_on else "-")
    table.add_row("Ext Expires On", result.ext_expires_on.isoformat() if result.ext_expires_on else "-")
    table.add_row("Family ID", result.family_id or "-")
    table.add_row("State", result.state or "-")

    if result.account:
        table.add_row("Account", result.account.username or result.account.home_account_id)

    console.print(table)


def show_accounts(accounts: List[AccountEntity], console: Console):
    """
    Display cached accounts

    Args:
        accounts: Accounts from the token cache
        console: Rich console for output
    """
    if not accounts:
        console.print("No cached accounts")
        return

    table = Table(title="Cached Accounts")
    table.add_column("Account Key", style="cyan")
    table.add_column("Username")
    table.add_column("Environment")
    table.add_column("Realm")
    table.add_column("Type")

    for account in accounts:
        table.add_row(
            account.generate_account_key(),
            account.username or "-",
            account.environment,
            account.realm or "-",
            account.authority_type,
        )

    console.print(table)
