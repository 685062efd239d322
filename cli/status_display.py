"""Settings and token status display for CLI"""

import json
from datetime import datetime
from typing import Any, Dict

from rich.table import Table

from docsync import ConfigurationError, Settings
from google_oauth import TokenSet, parse_client_config


def redact(value: str, keep: int = 12) -> str:
    """Show only the start of a secret"""
    if not value:
        return "[dim]not set[/dim]"
    if len(value) <= keep:
        return "***"
    return f"{value[:keep]}…"


def get_token_status(settings: Settings) -> Dict[str, Any]:
    """
    Summarize the cached token without exposing secrets

    Args:
        settings: Settings record

    Returns:
        Dictionary with has_tokens, is_expired, can_refresh, expires_at, time_until_expiry, scopes
    """
    status: Dict[str, Any] = {
        "has_tokens": False,
        "is_expired": True,
        "can_refresh": False,
        "expires_at": None,
        "time_until_expiry": "No tokens",
        "scopes": [],
    }

    if not settings.tokens.strip():
        return status

    try:
        tokens = TokenSet.from_dict(json.loads(settings.tokens))
    except (ValueError, KeyError, TypeError) as e:
        raise ConfigurationError(f"Stored Google tokens are not readable: {e}") from e

    status["has_tokens"] = True
    status["is_expired"] = tokens.is_expired()
    status["can_refresh"] = bool(tokens.refresh_token)
    status["scopes"] = sorted(tokens.scopes)

    if tokens.expiry_date is None:
        status["time_until_expiry"] = "unknown"
        return status

    expires_dt = datetime.fromtimestamp(tokens.expiry_date / 1000)
    status["expires_at"] = expires_dt.isoformat(timespec="seconds")

    delta = (expires_dt - datetime.now()).total_seconds()
    if delta <= 0:
        status["time_until_expiry"] = "expired"
    else:
        hours = int(delta // 3600)
        minutes = int((delta % 3600) // 60)
        status["time_until_expiry"] = f"{hours}h {minutes}m" if hours > 0 else f"{minutes}m"

    return status


def show_settings(settings: Settings, settings_file, console) -> None:
    """
    Display the settings record with secrets redacted

    Args:
        settings: Settings record
        settings_file: Path the record was loaded from
        console: Rich console for output
    """
    table = Table(title="Google Docs Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Google Drive Folder ID", settings.folder_id or "[dim]none (My Drive)[/dim]")

    if settings.credentials.strip():
        try:
            client = parse_client_config(settings.credentials)
            table.add_row("Google Application Credentials", f"client {redact(client.client_id, 24)}")
        except ConfigurationError as e:
            table.add_row("Google Application Credentials", f"[red]invalid[/red] ({e})")
    else:
        table.add_row("Google Application Credentials", redact(""))

    table.add_row("Google Application Tokens", redact(settings.tokens))
    table.add_row("Settings File", str(settings_file))

    console.print(table)


def show_token_status(settings: Settings, console) -> None:
    """
    Display detailed token status

    Args:
        settings: Settings record
        console: Rich console for output
    """
    status = get_token_status(settings)

    table = Table(title="Token Status Details")
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    table.add_row("Has Tokens", "Yes" if status["has_tokens"] else "No")
    if status["has_tokens"]:
        table.add_row("Access Token Expired", "Yes" if status["is_expired"] else "No")
        table.add_row("Refreshable", "Yes" if status["can_refresh"] else "No")
        if status["expires_at"]:
            table.add_row("Expires At", status["expires_at"])
        table.add_row("Time Until Expiry", status["time_until_expiry"])
        table.add_row("Scopes", "\n".join(status["scopes"]) or "[dim]unknown[/dim]")

    console.print(table)
