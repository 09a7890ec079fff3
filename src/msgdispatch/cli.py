"""msgdispatch server CLI."""

import asyncio
import logging

import typer
from rich.console import Console
from rich.table import Table

from msgdispatch import __version__
from msgdispatch.config import get_settings

app = typer.Typer(
    name="msgdispatch",
    help="msgdispatch - scheduled outbound message dispatcher",
    no_args_is_help=True,
)

console = Console()

db_app = typer.Typer(help="Database management commands")
app.add_typer(db_app, name="db")


def run_async(coro):
    """Run an async function synchronously."""
    return asyncio.run(coro)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


@app.command()
def serve(
    shutdown_timeout: int = typer.Option(
        60, "--shutdown-timeout", help="Timeout for graceful shutdown in seconds"
    ),
):
    """Start the API server and the dispatch worker."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)

    console.print(
        f"[green]Starting {settings.service_name} on {settings.api_host}:{settings.api_port}[/green]"
    )
    uvicorn.run(
        "msgdispatch.main:create_default_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=shutdown_timeout,
    )


@app.command()
def version():
    """Show version information."""
    console.print(f"msgdispatch version {__version__}")


@app.command()
def show_config():
    """Show current configuration."""
    settings = get_settings()

    table = Table(title="msgdispatch Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for field_name in type(settings).model_fields:
        value = getattr(settings, field_name)
        # Hide sensitive values
        if "key" in field_name.lower() or "secret" in field_name.lower():
            value = "********"
        table.add_row(field_name, str(value))

    console.print(table)


@db_app.command("init")
def db_init():
    """Create database tables."""
    from msgdispatch.db.session import create_engine, init_models

    settings = get_settings()

    async def init():
        engine = create_engine(settings)
        try:
            await init_models(engine)
        finally:
            await engine.dispose()

    run_async(init())
    console.print("[green]Database tables created[/green]")


@app.command()
def seed(
    count: int = typer.Option(None, "--count", "-c", help="Number of messages to insert"),
    force: bool = typer.Option(False, "--force", "-f", help="Seed even if enough are pending"),
):
    """Insert demo pending messages."""
    from msgdispatch.store.messages import SQLMessageStore
    from msgdispatch.store.seed import seed_messages

    settings = get_settings()

    async def run_seed() -> int:
        store = SQLMessageStore.from_settings(settings)
        try:
            return await seed_messages(
                store,
                target=settings.dispatch_batch_size,
                count=count if count is not None else settings.seed_message_count,
                recipient=settings.seed_recipient,
                force=force,
            )
        finally:
            await store.close()

    inserted = run_async(run_seed())
    if inserted:
        console.print(f"[green]Seeded {inserted} messages[/green]")
    else:
        console.print("[yellow]No messages seeded[/yellow]")


@app.command("dispatch-once")
def dispatch_once():
    """Run a single dispatch cycle and print its summary."""
    from msgdispatch.service import build_components

    settings = get_settings()
    configure_logging(settings.log_level)

    async def run_cycle():
        components = build_components(settings)
        try:
            return await components.worker.process()
        finally:
            await components.client.aclose()
            await components.cache.close()
            await components.store.close()

    result = run_async(run_cycle())

    table = Table(title="Dispatch cycle")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("result", result.label)
    for field_name in ("fetched", "sent", "failed", "invalid", "unrecorded"):
        table.add_row(field_name, str(getattr(result, field_name)))
    console.print(table)

    if result.timed_out or result.fetch_error:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
