from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError, version as package_version

import typer
from dotenv import find_dotenv, load_dotenv

from staged_review.app.config import AppSettings
from staged_review.app.config_commands import register_config_commands
from staged_review.app.tui import ReviewApp
from staged_review.domains.providers.resolver import resolve_provider
from staged_review.domains.review.service import ReviewService
from staged_review.infra.clients.git import GitClient
from staged_review.infra.clients.llm import LLMClient, LLMClientConfig
from staged_review.infra.repositories.config_store import ConfigStore
from staged_review.shared.errors import ConfigurationError, LLMInvocationError


logger = logging.getLogger(__name__)

_QUIET_LOGGERS = ("httpx", "httpcore", "openai")

cli = typer.Typer(
    add_completion=False,
    help="Review the staged git changes with an LLM and browse the results in the terminal.",
    rich_markup_mode=None,
)
register_config_commands(cli)


def _setup_logging(log_level_name: str, log_file: str | None = None) -> None:
    handler_kwargs = {"filename": log_file} if log_file else {}
    fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    level = getattr(logging, log_level_name.upper(), None)
    if not isinstance(level, int):
        logging.basicConfig(level=logging.INFO, format=fmt, **handler_kwargs)
        logging.getLogger(__name__).warning(
            "Invalid STAGED_REVIEW_LOG_LEVEL '%s', defaulting to INFO",
            log_level_name,
        )
    else:
        logging.basicConfig(level=level, format=fmt, **handler_kwargs)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.getLogger().level, logging.WARNING))


def _version_callback(value: bool) -> None:
    if not value:
        return
    try:
        typer.echo(package_version("staged-review"))
    except PackageNotFoundError:
        typer.echo("unknown")
    raise typer.Exit()


def create_review_app(settings: AppSettings) -> ReviewApp:
    store = ConfigStore(settings.config_path)
    try:
        provider_settings = store.load()
    except ConfigurationError as exc:
        typer.echo(f"Error: failed to load config: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    try:
        resolved = resolve_provider(provider_settings)
        llm_client = LLMClient(
            LLMClientConfig(
                api_key=resolved.api_key,
                model=resolved.model,
                base_url=resolved.base_url,
            )
        )
    except (ConfigurationError, LLMInvocationError) as exc:
        typer.echo(f"Error: failed to initialize LLM provider: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    logger.info(
        "Using provider '%s' with model %s at %s",
        provider_settings.name or "default",
        llm_client.model_name,
        llm_client.base_url or "the default endpoint",
    )

    review_service = ReviewService(git_client=GitClient(), llm_client=llm_client)
    return ReviewApp(review=review_service.review_staged_changes)


@cli.callback(invoke_without_command=True)
def root(
    ctx: typer.Context,
    show_version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    settings = AppSettings.from_env()
    _setup_logging(settings.log_level, settings.log_file)
    ctx.obj = settings

    if ctx.invoked_subcommand is not None:
        return

    create_review_app(settings).run()


def main() -> None:
    load_dotenv(find_dotenv(usecwd=True), override=False)
    cli()


if __name__ == "__main__":
    main()
