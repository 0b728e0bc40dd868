from __future__ import annotations

from typing import Optional

import typer

from staged_review.app.config import AppSettings
from staged_review.infra.repositories.config_store import ConfigStore
from staged_review.shared.errors import ConfigurationError


def _store(ctx: typer.Context) -> ConfigStore:
    settings = ctx.obj if isinstance(ctx.obj, AppSettings) else AppSettings.from_env()
    return ConfigStore(settings.config_path)


def register_config_commands(cli: typer.Typer) -> None:
    config_app = typer.Typer(
        help="Manage the config file: set API keys and switch providers.",
        rich_markup_mode=None,
    )

    @config_app.command("set-key")
    def set_key(
        ctx: typer.Context,
        api_key: str = typer.Argument(..., help="API key to store."),
        provider: Optional[str] = typer.Option(
            None,
            "--provider",
            "-p",
            help="Provider name (e.g. openai, deepseek, qwen). Omit to use the single-provider layout.",
        ),
    ) -> None:
        """Set the API key for a provider, or the top-level key when no provider is given."""
        store = _store(ctx)
        try:
            store.set_api_key(api_key, provider=provider)
        except ConfigurationError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(code=1) from exc

        if provider:
            typer.echo(f"API key set for provider '{provider}'")
        else:
            typer.echo("API key set (single-provider mode)")
        typer.echo(f"Config saved to {store.path}")

    @config_app.command("set-provider")
    def set_provider(
        ctx: typer.Context,
        provider: str = typer.Argument(..., help="Name of an already configured provider."),
    ) -> None:
        """Switch the default provider. The provider must already have an API key."""
        store = _store(ctx)
        try:
            store.set_default_provider(provider)
        except ConfigurationError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(code=1) from exc

        typer.echo(f"Default provider set to '{provider}'")
        typer.echo(f"Config saved to {store.path}")

    cli.add_typer(config_app, name="config")
