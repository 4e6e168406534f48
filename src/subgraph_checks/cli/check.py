from pathlib import Path
from typing import Annotated

import typer
from graphql import GraphQLSyntaxError
from rich.console import Console
from rich.table import Table

from subgraph_checks.config import load_settings
from subgraph_checks.core.aggregate import aggregate
from subgraph_checks.core.errors import UnknownStrategyError
from subgraph_checks.core.rules.registry import available_strategies, build_evaluator
from subgraph_checks.models import CheckResult, CheckStatus

console = Console()


def _render_result(result: CheckResult) -> None:
    table = Table(show_lines=False)
    for header in ("level", "rule", "message", "location"):
        table.add_column(header)
    for violation in result.violations:
        location = ""
        if violation.source_locations:
            start = violation.source_locations[0].start
            location = f"{start.line}:{start.column} (byte {start.byte_offset})"
        table.add_row(violation.level.value, violation.rule, violation.message, location)
    console.print(table)
    colour = "green" if result.status == CheckStatus.SUCCESS else "red"
    console.print(f"[{colour}]{result.status.value}[/{colour}] ({len(result.violations)} violations)")


def check(
    sdl_file: Annotated[Path, typer.Argument(exists=True, dir_okay=False, help="Subgraph SDL file to check.")],
    strategy: Annotated[str, typer.Option(help="Rule strategy to run.")] = "combined",
    name: Annotated[str | None, typer.Option(help="Subgraph name; defaults to the file stem.")] = None,
    supergraph: Annotated[
        Path | None, typer.Option(exists=True, dir_okay=False, help="Supergraph SDL used as lint context.")
    ] = None,
) -> None:
    """Run a rule strategy against a local SDL file. Exits 1 on FAILURE."""
    try:
        evaluator = build_evaluator(strategy, load_settings())
    except UnknownStrategyError as exc:
        console.print(f"[red]{exc}[/red] (available: {', '.join(available_strategies())})")
        raise typer.Exit(code=2) from None

    source = sdl_file.read_text(encoding="utf-8")
    supergraph_text = supergraph.read_text(encoding="utf-8") if supergraph else None
    try:
        violations = evaluator.evaluate(name or sdl_file.stem, source, supergraph_text)
    except GraphQLSyntaxError as exc:
        console.print(f"[red]{sdl_file}: {exc.message}[/red]")
        raise typer.Exit(code=2) from None

    result = aggregate("local", "local", [violations])
    _render_result(result)
    if result.status == CheckStatus.FAILURE:
        raise typer.Exit(code=1)


def strategies() -> None:
    """List registered rule strategies."""
    for strategy in available_strategies():
        console.print(strategy)
