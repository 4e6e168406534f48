import os
from pathlib import Path
from typing import Annotated

import typer

from subgraph_checks.core.signature import SIGNATURE_HEADER, compute_signature


def sign(
    payload: Annotated[Path, typer.Argument(exists=True, dir_okay=False, help="File holding the exact request body.")],
    secret: Annotated[str | None, typer.Option(help="HMAC secret; defaults to $APOLLO_HMAC_TOKEN.")] = None,
    header: Annotated[bool, typer.Option("--header", help="Print as a full HTTP header line.")] = False,
) -> None:
    """Print the signature the orchestrator would send for a payload file."""
    key = secret if secret is not None else os.getenv("APOLLO_HMAC_TOKEN", "")
    signature = compute_signature(payload.read_bytes(), key)
    typer.echo(f"{SIGNATURE_HEADER}: {signature}" if header else signature)
