import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from protolink.catalog import GOOGLE_TYPE_PREFIX, load_catalog
from protolink.errors import CatalogLoadError

console = Console()


def catalog() -> None:
    """List the well-known type files available to every schema."""
    try:
        entries = load_catalog()
    except CatalogLoadError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from e

    table = Table(show_lines=False)
    table.add_column("path")
    table.add_column("bytes", justify="right")
    for name, content in entries.items():
        table.add_row(f"{GOOGLE_TYPE_PREFIX}{name}", str(len(content)))
    console.print(table)
    console.print(f"({len(entries)} files)")
