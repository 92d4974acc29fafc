"""CLI: lingua-relay history|contacts|presence"""

import json
from datetime import datetime

import click
import httpx
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from lingua_relay.client import DEFAULT_BASE_URL
from lingua_relay.errors import RelayError

console = Console()

url_option = click.option("--url", "base_url", default=DEFAULT_BASE_URL, show_default=True, help="Relay base URL")
json_option = click.option("--json-output", "--json", is_flag=True)


def _client(base_url: str):
    from lingua_relay.cli.main import _client
    return _client(base_url)


def _run(coro):
    from lingua_relay.cli.main import _run
    return _run(coro)


def _fmt_ms(ms) -> str:
    if not ms:
        return ""
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


def _fetch(base_url: str, method: str, *args):
    async def _go():
        async with _client(base_url) as client:
            return await getattr(client, method)(*args)
    try:
        return _run(_go())
    except (RelayError, httpx.HTTPError) as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise SystemExit(1)


@click.command("history")
@click.argument("user_id")
@click.argument("other_id")
@url_option
@json_option
def history_cmd(user_id: str, other_id: str, base_url: str, json_output: bool):
    """Show the conversation between USER_ID and OTHER_ID."""
    messages = _fetch(base_url, "history", user_id, other_id)
    if json_output:
        click.echo(json.dumps(messages, indent=2))
        return
    table = Table(title=f"{user_id} ↔ {other_id} ({len(messages)} messages)")
    table.add_column("Time", style="dim")
    table.add_column("From", style="bold")
    table.add_column("Lang")
    table.add_column("Text")
    table.add_column("Read")
    for m in messages:
        text = escape(m.get("text") or ("(image)" if m.get("image_data") else ""))
        table.add_row(_fmt_ms(m.get("timestamp")), m["sender_id"], m.get("sender_lang") or "",
                      text, "✓" if m.get("is_read") else "")
    console.print(table)


@click.command("contacts")
@click.argument("user_id")
@url_option
@json_option
def contacts_cmd(user_id: str, base_url: str, json_output: bool):
    """List USER_ID's contacts."""
    contacts = _fetch(base_url, "contacts", user_id)
    if json_output:
        click.echo(json.dumps(contacts, indent=2))
        return
    table = Table(title=f"Contacts of {user_id}")
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Email")
    table.add_column("Last message")
    table.add_column("When", style="dim")
    for c in contacts:
        table.add_row(c["id"], c.get("username") or "", c.get("email") or "",
                      escape(c.get("last_message") or ""), _fmt_ms(c.get("last_message_time")))
    console.print(table)


@click.command("presence")
@click.argument("user_id")
@url_option
def presence_cmd(user_id: str, base_url: str):
    """Check whether USER_ID is online."""
    result = _fetch(base_url, "presence", user_id)
    if result.get("online"):
        console.print(f"[green]{user_id} is online[/green]")
    else:
        console.print(f"[yellow]{user_id} is offline[/yellow]")
