"""Main CLI application module."""

import typer
from rich.console import Console
from rich.panel import Panel

console = Console()

app = typer.Typer(
    help="📚 Bookshelf CLI - run the API and prepare its database",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.command(name="serve")
def serve(
    host: str | None = typer.Option(None, help="Host to bind (defaults to app.host)"),
    port: int | None = typer.Option(None, help="Port to bind (defaults to app.port)"),
    reload: bool = typer.Option(False, help="Enable auto-reload on code changes"),
) -> None:
    """
    🚀 Start the Bookshelf API server.
    """
    import uvicorn

    from src.bookshelf.runtime.context import get_config

    config = get_config()
    bind_host = host or config.app.host
    bind_port = port or config.app.port

    console.print(
        Panel.fit(
            f"[bold green]Serving Bookshelf API on {bind_host}:{bind_port}[/bold green]",
            border_style="green",
        )
    )
    uvicorn.run(
        "src.bookshelf.api.http.app:create_app",
        factory=True,
        host=bind_host,
        port=bind_port,
        reload=reload,
        access_log=False,  # Request logging happens in middleware
    )


@app.command(name="init-db")
def init_db() -> None:
    """
    🗄️ Create the books table in the configured database.
    """
    from src.bookshelf.runtime.init_db import init_db as create_tables

    try:
        create_tables()
    except Exception as e:
        console.print(f"[red]Database initialization failed: {e}[/red]")
        raise typer.Exit(1) from e
    console.print("[green]✅ Database initialized[/green]")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
