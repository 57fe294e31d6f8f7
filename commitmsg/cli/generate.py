"""CLI command for generating commit messages."""

from pathlib import Path
from typing import List, Optional

import typer

from commitmsg.config import LLMProvider, load_config
from commitmsg.context import GenerationContext
from commitmsg.exceptions import CommitMsgError, EmptyChangesError
from commitmsg.git import GitError, NoStagedChangesError, get_staged_diff
from commitmsg.llm import BaseLLMProvider, GenerationOptions, get_provider
from commitmsg.orchestrator import BatchItem, Orchestrator

_VALID_PROVIDERS = ", ".join(p.value for p in LLMProvider)


def _parse_provider(provider: Optional[str]) -> Optional[LLMProvider]:
    if provider is None:
        return None
    try:
        return LLMProvider(provider.lower())
    except ValueError:
        typer.echo(f"Invalid provider: {provider}", err=True)
        typer.echo(f"Valid providers: {_VALID_PROVIDERS}")
        raise typer.Exit(1)


def _generate_for_repos(
    orchestrator: Orchestrator,
    ctx: GenerationContext,
    llm: BaseLLMProvider,
    options: GenerationOptions,
    repos: List[Path],
    max_diff_chars: int,
) -> List[BatchItem]:
    """Generate one result per repository; a repository whose diff cannot be read gets its error."""
    results: List[Optional[BatchItem]] = [None] * len(repos)
    pending = []
    for index, repo in enumerate(repos):
        try:
            pending.append((index, get_staged_diff(max_chars=max_diff_chars, repo_root=repo)))
        except GitError as e:
            results[index] = BatchItem("", error=e)

    generated = orchestrator.generate_batch(ctx, llm, [diff for _, diff in pending], options)
    for (index, _), item in zip(pending, generated):
        results[index] = item
    return results


def generate_command(
    provider: Optional[str] = typer.Option(
        None,
        "--provider",
        "-p",
        help=f"Provider to use ({_VALID_PROVIDERS}). Defaults to the configured one.",
    ),
    model: Optional[str] = typer.Option(
        None,
        "--model",
        "-m",
        help="Model name (defaults to the provider's configured model)",
    ),
    style: Optional[str] = typer.Option(
        None,
        "--style",
        "-s",
        help="Extra style instructions for the message",
    ),
    attempt: int = typer.Option(
        1,
        "--attempt",
        "-a",
        min=1,
        help="Attempt number; use a new number to get a different message for the same changes",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Give up after this many seconds",
    ),
    max_diff_chars: int = typer.Option(
        50000,
        "--max-diff-chars",
        help="Maximum characters for the staged diff",
    ),
    repos: Optional[List[Path]] = typer.Option(
        None,
        "--repo",
        "-r",
        help="Repository to describe (repeat to process several repositories in parallel)",
    ),
) -> None:
    """Generate a commit message from staged changes."""
    llm_provider = _parse_provider(provider)

    try:
        load_config()
        orchestrator = Orchestrator.from_config()
        llm = get_provider(llm_provider, model)
        options = GenerationOptions(style_instruction=style, attempt=attempt)
        ctx = GenerationContext.with_timeout(timeout)

        if not repos:
            diff = get_staged_diff(max_chars=max_diff_chars)
            typer.echo(orchestrator.generate_message(ctx, llm, diff, options))
            return

        results = _generate_for_repos(orchestrator, ctx, llm, options, repos, max_diff_chars)

    except (NoStagedChangesError, EmptyChangesError) as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1)
    except (CommitMsgError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    failed = 0
    for repo, item in zip(repos, results):
        typer.echo(f"== {repo} ==")
        if item.ok:
            typer.echo(item.message)
        else:
            failed += 1
            typer.echo(f"Error: {item.error}", err=True)
        typer.echo()

    if failed:
        raise typer.Exit(1)
