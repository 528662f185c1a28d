"""
ssmtunnel CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys

import typer
from rich.console import Console

from ssmtunnel import __version__
from ssmtunnel.cli import tunnel
from ssmtunnel.core.config import load_layered_env

app = typer.Typer(
    name="ssmtunnel",
    help="Open AWS Systems Manager session tunnels through session-manager-plugin",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def configure_logging(debug: bool = False) -> None:
    """
    Configure logging for all commands.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
) -> None:
    """
    ssmtunnel - hand an established SSM session to session-manager-plugin.

    Quick Start:
        ssmtunnel check                              # Is the plugin installed?
        ssmtunnel args -s session.json -t i-0abc     # Preview plugin arguments
        ssmtunnel start -s session.json -t i-0abc    # Open the tunnel
    """
    # Precedence: OS env > project .env > user .env
    load_layered_env()
    configure_logging(debug)

    ctx.obj = {"debug": debug}


app.command(name="start")(tunnel.start)
app.command(name="args")(tunnel.args)
app.command(name="check")(tunnel.check)


@app.command()
def version() -> None:
    """Show ssmtunnel version and exit."""
    console.print(f"ssmtunnel version {__version__}")


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
