"""CLI entry point for commitmsg.

This module provides the main CLI application that combines all commands
and subcommands into a single unified interface.
"""

from typing import Optional

import typer

from commitmsg import __version__, global_config
from commitmsg.cli.cache import cache_app
from commitmsg.cli.config import config_app
from commitmsg.cli.generate import generate_command
from commitmsg.cli.stats import stats_app
from commitmsg.exceptions import ConfigurationError
from commitmsg.logging_config import setup_logging

# Main application
app = typer.Typer(
    name="commitmsg",
    help="commitmsg: AI-generated git commit messages",
    add_completion=False,
)

# Add subcommand groups
app.add_typer(config_app, name="config")
app.add_typer(stats_app, name="stats")
app.add_typer(cache_app, name="cache")

# Add individual commands
app.command("generate")(generate_command)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"commitmsg {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr"),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """Generate commit messages from staged changes with cached LLM calls."""
    if verbose:
        level = "DEBUG"
    else:
        try:
            level = global_config.get_log_level()
        except ConfigurationError:
            # The command itself reports the broken config
            level = "WARNING"
    setup_logging(level)


__all__ = [
    "app",
    "cache_app",
    "config_app",
    "generate_command",
    "stats_app",
]
