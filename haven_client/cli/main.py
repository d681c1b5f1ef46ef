"""CLI commands for the Harmony Haven client."""

import json
import logging
import sys
import time
import uuid
from collections.abc import Callable, Generator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass

import click
import structlog
from pydantic import BaseModel

from haven_client import __version__
from haven_client.feeds import (
    ArticleCatalog,
    CategoryCatalog,
    NotificationsFeed,
    PaginatedFeed,
    QuotesFeed,
    ThreadedScheduler,
    user_message,
)
from haven_client.observability import (
    bind_invocation_context,
    clear_invocation_context,
    configure_logging,
)
from haven_client.services import (
    ArticleService,
    AuthenticationService,
    CategoryService,
    ChatService,
    NotificationService,
    QuoteService,
)
from haven_client.session import SessionContext, SqliteKeyValueStore
from haven_client.session.manager import SessionManager
from haven_client.settings import HavenSettings, get_settings
from haven_client.transport import (
    ApiClient,
    ClientConfig,
    NetworkError,
    RetryPolicy,
    TransportMetrics,
)


logger = structlog.get_logger()

# Upper bound on waiting for one feed or catalog load.
LOAD_TIMEOUT_SECONDS = 120.0
POLL_INTERVAL_SECONDS = 0.1


@dataclass
class Runtime:
    """Collaborators shared by the commands of one invocation."""

    settings: HavenSettings
    client: ApiClient
    session: SessionContext
    retry_policy: RetryPolicy
    scheduler: ThreadedScheduler


@contextmanager
def open_runtime(verbose: bool) -> Generator[Runtime]:
    """Build the runtime from settings and tear it down afterwards."""
    settings = get_settings()
    level = logging.DEBUG if verbose else settings.log_level
    configure_logging(level=level, json_format=settings.log_json)
    bind_invocation_context(str(uuid.uuid4()))

    scheduler = ThreadedScheduler()
    try:
        with (
            SqliteKeyValueStore(settings.token_store_path) as store,
            ApiClient(ClientConfig.from_settings(settings)) as client,
        ):
            yield Runtime(
                settings=settings,
                client=client,
                session=SessionContext(store, token_key=settings.auth_token_key),
                retry_policy=RetryPolicy.from_settings(settings),
                scheduler=scheduler,
            )
    finally:
        scheduler.shutdown()
        logger.debug(
            "transport_metrics",
            component="cli",
            **TransportMetrics.get_instance().to_dict(),
        )
        clear_invocation_context()


def wait_until(
    scheduler: ThreadedScheduler,
    done: Callable[[], bool],
    timeout: float = LOAD_TIMEOUT_SECONDS,
) -> bool:
    """Drain scheduler callbacks until ``done`` holds or time runs out."""
    deadline = time.monotonic() + timeout
    while not done():
        if time.monotonic() >= deadline:
            return False
        scheduler.run_pending(timeout=POLL_INTERVAL_SECONDS)
    return True


def echo_models(models: Sequence[BaseModel], json_output: bool) -> None:
    """Print entities as JSON or one summary line each."""
    if json_output:
        payload = [model.model_dump(mode="json") for model in models]
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return
    for model in models:
        data = model.model_dump(mode="json")
        label = data.get("title") or data.get("name") or data.get("content", "")
        click.echo(f"  [{data['id']}] {label}")


def fail(message: str) -> None:
    """Report an error and exit with status 1."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def load_feed_pages(
    runtime: Runtime, feed: PaginatedFeed, pages: int  # type: ignore[type-arg]
) -> None:
    """Load the first page and up to ``pages - 1`` further pages."""
    feed.load_first()
    if not wait_until(runtime.scheduler, lambda: not feed.cursor.fetch_in_flight):
        fail("Timed out waiting for the server")
    for _ in range(pages - 1):
        if feed.error is not None or not feed.cursor.has_more or not feed.items:
            break
        feed.load_next_if_needed(feed.items[-1].id)
        if not wait_until(runtime.scheduler, lambda: not feed.cursor.fetch_in_flight):
            fail("Timed out waiting for the server")
    if feed.error_message is not None and not feed.items:
        fail(feed.error_message)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Harmony Haven client CLI."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command()
@click.option("--email", required=True, help="Account email.")
@click.option("--password", prompt=True, hide_input=True, help="Account password.")
@click.pass_context
def login(ctx: click.Context, email: str, password: str) -> None:
    """Sign in and store the session token."""
    with open_runtime(ctx.obj["verbose"]) as runtime:
        manager = SessionManager(
            AuthenticationService(runtime.client, runtime.retry_policy),
            runtime.session,
        )
        if not manager.login(email, password):
            fail(manager.error_message or "Login failed")
        click.echo("Signed in.")


@cli.command()
@click.option("--name", required=True, help="Display name.")
@click.option("--email", required=True, help="Account email.")
@click.option(
    "--password",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Account password.",
)
@click.pass_context
def register(ctx: click.Context, name: str, email: str, password: str) -> None:
    """Create an account and store the session token."""
    with open_runtime(ctx.obj["verbose"]) as runtime:
        manager = SessionManager(
            AuthenticationService(runtime.client, runtime.retry_policy),
            runtime.session,
        )
        if not manager.register(name, email, password):
            fail(manager.error_message or "Registration failed")
        click.echo("Account created and signed in.")


@cli.command()
@click.pass_context
def logout(ctx: click.Context) -> None:
    """Remove the stored session token."""
    with open_runtime(ctx.obj["verbose"]) as runtime:
        manager = SessionManager(
            AuthenticationService(runtime.client, runtime.retry_policy),
            runtime.session,
        )
        manager.logout()
        click.echo("Signed out.")


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show whether a session token is stored."""
    with open_runtime(ctx.obj["verbose"]) as runtime:
        manager = SessionManager(
            AuthenticationService(runtime.client, runtime.retry_policy),
            runtime.session,
        )
        signed_in = manager.restore()
        click.echo(f"Base URL: {runtime.settings.base_url}")
        click.echo(f"Signed in: {'yes' if signed_in else 'no'}")


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_context
def categories(ctx: click.Context, json_output: bool) -> None:
    """List article categories."""
    with open_runtime(ctx.obj["verbose"]) as runtime:
        catalog = CategoryCatalog(
            CategoryService(runtime.client, runtime.retry_policy), runtime.scheduler
        )
        catalog.load()
        if not wait_until(runtime.scheduler, lambda: not catalog.is_loading):
            fail("Timed out waiting for the server")
        if catalog.error_message is not None:
            fail(catalog.error_message)
        echo_models(catalog.items, json_output)


@cli.command()
@click.option("--category", "category_id", type=int, help="Only this category.")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_context
def articles(ctx: click.Context, category_id: int | None, json_output: bool) -> None:
    """List articles, optionally for one category."""
    with open_runtime(ctx.obj["verbose"]) as runtime:
        catalog = ArticleCatalog(
            ArticleService(runtime.client, runtime.retry_policy), runtime.scheduler
        )
        if category_id is None:
            catalog.load()
        else:
            catalog.load_articles_by_category(category_id)
        if not wait_until(runtime.scheduler, lambda: not catalog.is_loading):
            fail("Timed out waiting for the server")
        if catalog.error_message is not None:
            fail(catalog.error_message)
        echo_models(catalog.items, json_output)


@cli.command()
@click.option(
    "--category",
    "category_id",
    type=int,
    default=None,
    help="Quote category (default from settings).",
)
@click.option("--pages", type=click.IntRange(min=1), default=1, help="Pages to load.")
@click.option("--seed", type=int, default=None, help="Fixed shuffle seed.")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_context
def quotes(
    ctx: click.Context,
    category_id: int | None,
    pages: int,
    seed: int | None,
    json_output: bool,
) -> None:
    """List quotes for a category."""
    with open_runtime(ctx.obj["verbose"]) as runtime:
        settings = runtime.settings
        feed = QuotesFeed(
            QuoteService(runtime.client, runtime.retry_policy, runtime.session),
            runtime.scheduler,
            category_id=(
                settings.quotes_default_category if category_id is None else category_id
            ),
            seed=seed,
            page_size=settings.quotes_page_size,
            first_page_retry_delay=settings.first_page_retry_delay_seconds,
            duplicate_page_advance_delay=settings.duplicate_page_advance_delay_seconds,
            force_load_retry_delay=settings.force_load_retry_delay_seconds,
        )
        load_feed_pages(runtime, feed, pages)
        echo_models(feed.items, json_output)
        if not json_output:
            click.echo(
                f"Page {feed.cursor.current_page} of {feed.cursor.total_pages}"
                f" (seed {feed.seed})"
            )


@cli.command()
@click.option("--pages", type=click.IntRange(min=1), default=1, help="Pages to load.")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_context
def notifications(ctx: click.Context, pages: int, json_output: bool) -> None:
    """List notifications of the signed-in user."""
    with open_runtime(ctx.obj["verbose"]) as runtime:
        settings = runtime.settings
        feed = NotificationsFeed(
            NotificationService(runtime.client, runtime.retry_policy, runtime.session),
            runtime.scheduler,
            page_size=settings.notifications_page_size,
            first_page_retry_delay=settings.first_page_retry_delay_seconds,
            duplicate_page_advance_delay=settings.duplicate_page_advance_delay_seconds,
            force_load_retry_delay=settings.force_load_retry_delay_seconds,
        )
        load_feed_pages(runtime, feed, pages)
        echo_models(feed.items, json_output)


@cli.command()
@click.argument("prompt")
@click.pass_context
def chat(ctx: click.Context, prompt: str) -> None:
    """Ask the assistant and print the reply as it streams in."""
    with open_runtime(ctx.obj["verbose"]) as runtime:
        service = ChatService(runtime.client, session=runtime.session)
        try:
            for chunk in service.stream_reply(prompt):
                click.echo(chunk, nl=False)
        except NetworkError as e:
            click.echo()
            fail(user_message(e))
        click.echo()


if __name__ == "__main__":
    cli()
