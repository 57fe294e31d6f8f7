"""CLI commands for the message cache."""

import typer

from commitmsg.exceptions import CommitMsgError
from commitmsg.orchestrator import Orchestrator

# Subcommand group for cache management
cache_app = typer.Typer(
    name="cache",
    help="Inspect or clear the commit message cache",
    add_completion=False,
)


@cache_app.command("show")
def cache_show() -> None:
    """Show cache statistics."""
    try:
        orchestrator = Orchestrator.from_config()
        stats = orchestrator.cache_stats()
    except CommitMsgError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    config = orchestrator.cache.config
    typer.echo(f"Cache ({config.cache_file_path}):")
    typer.echo()
    typer.echo(f"  Enabled: {config.enabled}")
    typer.echo(f"  Entries: {stats.total_entries} / {config.max_entries}")
    typer.echo(f"  Hits: {stats.total_hits}")
    typer.echo(f"  Misses: {stats.total_misses}")
    typer.echo(f"  Hit rate: {stats.hit_rate * 100:.1f}%")
    typer.echo(f"  Cost saved: ${stats.total_cost_saved:.4f}")
    typer.echo(f"  Oldest entry: {stats.oldest_entry or '-'}")
    typer.echo(f"  Newest entry: {stats.newest_entry or '-'}")
    typer.echo(f"  Size: {stats.cache_size_bytes} bytes")


@cache_app.command("clear")
def cache_clear() -> None:
    """Remove all cached messages."""
    try:
        Orchestrator.from_config().clear_cache()
    except CommitMsgError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo("✓ Cache cleared")
