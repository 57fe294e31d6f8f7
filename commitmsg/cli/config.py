"""CLI commands for global configuration management."""

from typing import Optional

import typer

from commitmsg import global_config
from commitmsg.config import API_KEY_ENV_VARS, AVAILABLE_MODELS, LLMProvider
from commitmsg.exceptions import CommitMsgError

_VALID_PROVIDERS = ", ".join(p.value for p in LLMProvider)

# Subcommand group for configuration management
config_app = typer.Typer(
    name="config",
    help="Manage global commitmsg configuration in ~/.commitmsg/",
    add_completion=False,
)


def _parse_provider(provider: str) -> LLMProvider:
    try:
        return LLMProvider(provider.lower())
    except ValueError:
        typer.echo(f"Invalid provider: {provider}", err=True)
        typer.echo(f"Valid providers: {_VALID_PROVIDERS}")
        raise typer.Exit(1)


def _mask(api_key: str) -> str:
    return api_key[:8] + "..." + api_key[-4:] if len(api_key) > 12 else "***"


@config_app.command("show")
def config_show() -> None:
    """Show current global configuration."""
    try:
        if not global_config.is_configured():
            typer.echo("No configuration found. Run 'commitmsg config init' to set up.")
            return

        config = global_config.load_global_config()
        cache_config = global_config.get_cache_config()
        max_concurrent = global_config.get_max_concurrent()
        stats_file = global_config.get_stats_file_path()
    except CommitMsgError as e:
        typer.echo(f"Error reading configuration: {e}", err=True)
        raise typer.Exit(1)

    typer.echo("Current commitmsg configuration (~/.commitmsg/config.yaml):")
    typer.echo()
    typer.echo(f"  Provider: {config.get('provider', 'not set')}")
    typer.echo(f"  Model: {config.get('model', 'not set')}")
    typer.echo(f"  Max Tokens: {config.get('max_tokens', 1500)}")
    typer.echo(f"  Temperature: {config.get('temperature', 0.3)}")
    typer.echo(f"  Max Concurrent: {max_concurrent}")
    typer.echo()
    typer.echo("  Cache:")
    typer.echo(f"    Enabled: {cache_config.enabled}")
    typer.echo(f"    Max Entries: {cache_config.max_entries}")
    typer.echo(f"    Max Age (days): {cache_config.max_age_days}")
    typer.echo(f"    Cleanup Interval (hours): {cache_config.cleanup_interval_hours}")
    typer.echo(f"    File: {cache_config.cache_file_path}")
    typer.echo(f"  Stats File: {stats_file}")
    typer.echo()

    # Check for API key
    try:
        provider = LLMProvider(config.get("provider", ""))
    except ValueError:
        return
    env_var = API_KEY_ENV_VARS.get(provider)
    if env_var is None:
        return
    api_key = global_config.get_credential(env_var)
    typer.echo(f"  API Key ({env_var}): {_mask(api_key) if api_key else 'not set'}")


@config_app.command("init")
def config_init() -> None:
    """Write a default config.yaml if none exists."""
    try:
        if global_config.is_configured():
            typer.echo(f"Configuration already exists at {global_config.get_config_file_path()}")
            return
        global_config.initialize_default_config()
    except CommitMsgError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✓ Created {global_config.get_config_file_path()}")


@config_app.command("set-key")
def config_set_key(
    provider: str = typer.Argument(..., help=f"Provider name ({_VALID_PROVIDERS})"),
) -> None:
    """Set or update an API key for a provider."""
    llm_provider = _parse_provider(provider)

    env_var = API_KEY_ENV_VARS.get(llm_provider)
    if env_var is None:
        typer.echo(f"{llm_provider.value} does not use an API key.")
        return

    typer.echo(f"Setting API key for {llm_provider.value}")
    api_key = typer.prompt(f"Enter your {llm_provider.value} API key", hide_input=True)

    try:
        global_config.save_credential(env_var, api_key)
    except CommitMsgError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✓ API key saved for {llm_provider.value}")


@config_app.command("set-provider")
def config_set_provider(
    provider: str = typer.Argument(..., help=f"Provider name ({_VALID_PROVIDERS})"),
    model: Optional[str] = typer.Option(
        None,
        "--model",
        "-m",
        help="Model name (optional, will prompt if not provided)",
    ),
) -> None:
    """Set the active LLM provider and model."""
    llm_provider = _parse_provider(provider)

    if not model:
        models = AVAILABLE_MODELS[llm_provider]
        typer.echo(f"Available models for {llm_provider.value}:")
        for i, m in enumerate(models, 1):
            typer.echo(f"  {i}. {m}")

        model_choice = typer.prompt(f"Select a model (1-{len(models)})", type=int, default=1)
        if model_choice < 1 or model_choice > len(models):
            typer.echo("Invalid choice. Aborting.", err=True)
            raise typer.Exit(1)

        model = models[model_choice - 1]

    try:
        global_config.set_provider_and_model(llm_provider, model)
    except CommitMsgError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✓ Provider set to: {llm_provider.value}")
    typer.echo(f"✓ Model set to: {model}")
