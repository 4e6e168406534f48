import logging
from typing import Annotated

import typer
from rich.console import Console

console = Console()


def serve(
    host: str = "127.0.0.1",
    port: int = 8000,
    log_level: Annotated[str, typer.Option(help="Python logging level.")] = "INFO",
) -> None:
    """Start the check webhook API server."""
    import uvicorn

    from subgraph_checks.api.app import create_app

    logging.basicConfig(level=log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = create_app()
    console.print(f"[green]Starting API server on {host}:{port}[/green]")
    uvicorn.run(app, host=host, port=port, log_level=log_level.lower())
