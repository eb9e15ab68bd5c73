import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from protolink.cli.catalog import catalog
from protolink.cli.inspect_file import inspect
from protolink.config import get_settings

app = typer.Typer(
    name="protolink",
    help="protolink CLI: load and link .proto schemas in memory.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def configure_logging(level: str | int) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.callback()
def _root(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output.")] = False,
) -> None:
    configure_logging(logging.DEBUG if verbose else get_settings().log_level.upper())


app.command("inspect")(inspect)
app.command("catalog")(catalog)


def main() -> None:
    app()
