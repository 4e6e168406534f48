import typer

from subgraph_checks.cli.check import check, strategies
from subgraph_checks.cli.serve import serve
from subgraph_checks.cli.sign import sign

app = typer.Typer(
    name="subgraph-checks",
    help="Subgraph Checks CLI: run schema governance checks locally or as a webhook service.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("serve")(serve)
app.command("check")(check)
app.command("sign")(sign)
app.command("strategies")(strategies)


def main() -> None:
    app()
