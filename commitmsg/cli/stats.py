"""CLI commands for usage statistics."""

import typer

from commitmsg.exceptions import CommitMsgError
from commitmsg.orchestrator import Orchestrator

# Subcommand group for usage statistics
stats_app = typer.Typer(
    name="stats",
    help="Show or reset usage statistics",
    add_completion=False,
)


@stats_app.command("show")
def stats_show() -> None:
    """Show usage statistics across providers."""
    try:
        orchestrator = Orchestrator.from_config()
        stats = orchestrator.snapshot()
        ranking = orchestrator.provider_ranking()
        success_rate = orchestrator.overall_success_rate()
        hit_rate = orchestrator.cache_hit_rate()
    except CommitMsgError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if stats.total_generations == 0:
        typer.echo("No generations recorded yet.")
        return

    typer.echo("Usage statistics:")
    typer.echo()
    typer.echo(f"  Generations: {stats.total_generations}")
    typer.echo(f"  Successful: {stats.successful_generations}")
    typer.echo(f"  Failed: {stats.failed_generations}")
    typer.echo(f"  Success rate: {success_rate:.1f}%")
    typer.echo(f"  Cache hit rate: {hit_rate:.1f}%")
    typer.echo(f"  Average time: {stats.average_generation_time_ms:.0f} ms")
    typer.echo(f"  Total tokens: {stats.total_tokens_used}")
    typer.echo(f"  Total cost: ${stats.total_cost:.4f}")
    typer.echo(f"  First use: {stats.first_use}")
    typer.echo(f"  Last use: {stats.last_use}")
    typer.echo()
    typer.echo("  Providers:")
    for rank, name in enumerate(ranking, start=1):
        provider = stats.provider_stats[name]
        typer.echo(
            f"    {rank}. {name}: {provider.total_uses} uses, "
            f"{provider.success_rate:.1f}% success, "
            f"{provider.average_generation_time_ms:.0f} ms avg"
        )


@stats_app.command("reset")
def stats_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Clear all usage statistics."""
    if not yes and not typer.confirm("Reset all usage statistics?"):
        typer.echo("Aborted.")
        raise typer.Exit(0)

    try:
        Orchestrator.from_config().reset_stats()
    except CommitMsgError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo("✓ Usage statistics reset")
