"""
Lingua Relay CLI — `lingua-relay` command.

Commands:
  lingua-relay serve                 Run the relay (Socket.IO + REST)
  lingua-relay history USER OTHER    Conversation between two users
  lingua-relay contacts USER         Contacts with their latest message
  lingua-relay presence USER         Whether USER is online
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

try:
    import click
    from rich.console import Console
    from rich.logging import RichHandler
except ImportError:
    raise SystemExit("CLI requires extras: pip install lingua-relay[cli]")

from lingua_relay import __version__
from lingua_relay.client import RelayClient
from lingua_relay.config import load_config
from lingua_relay.errors import RelayError

console = Console()


def _run(coro):
    return asyncio.run(coro)


def _client(base_url: str) -> RelayClient:
    return RelayClient(base_url=base_url)


@click.group()
@click.version_option(__version__)
def main():
    """Lingua Relay — presence-aware chat and call signaling relay."""


@main.command("serve")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None, help="JSON config file")
@click.option("--host", default=None)
@click.option("--port", default=None, type=int)
@click.option("--store", type=click.Choice(["memory", "supabase"]), default=None)
@click.option("--log-level", default=None)
def serve(config_path: Optional[Path], host: Optional[str], port: Optional[int],
          store: Optional[str], log_level: Optional[str]):
    """Run the relay server."""
    import uvicorn

    from lingua_relay.app import create_app

    try:
        cfg = load_config(config_path, host=host, port=port, store=store, log_level=log_level)
        logging.basicConfig(
            level=cfg.log_level.upper(),
            format="%(message)s",
            handlers=[RichHandler(console=console, rich_tracebacks=True)],
        )
        app = create_app(cfg)
    except RelayError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)

    console.print(f"[green]Lingua Relay {__version__}[/green] on http://{cfg.host}:{cfg.port} [dim](store: {cfg.store})[/dim]")
    uvicorn.run(app, host=cfg.host, port=cfg.port, log_config=None)


from lingua_relay.cli.conversations import contacts_cmd, history_cmd, presence_cmd

main.add_command(history_cmd)
main.add_command(contacts_cmd)
main.add_command(presence_cmd)


if __name__ == "__main__":
    main()
