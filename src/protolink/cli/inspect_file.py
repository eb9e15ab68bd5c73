from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from protolink.core.bootstrap import load_schema
from protolink.core.parser import ProtoPackage, parse_proto_ast
from protolink.errors import ProtoLinkError
from protolink.models import MessageSummary, ProtoFileSummary

console = Console()


def _declared_package(text: str, path: str) -> str | None:
    ast = parse_proto_ast(text, path)
    for element in ast.elements:
        if isinstance(element, ProtoPackage):
            return element.name
    return None


def _message_rows(message: MessageSummary) -> list[tuple[str, str, str]]:
    rows = [("message", message.full_name, f"{len(message.fields)} fields")]
    for nested in message.nested:
        rows.extend(_message_rows(nested))
    return rows


def _render_summary(summary: ProtoFileSummary) -> None:
    console.print(f"[bold]{summary.path}[/bold] (package: {summary.package or '-'}, syntax: {summary.syntax})")

    table = Table(show_lines=False)
    table.add_column("kind")
    table.add_column("name")
    table.add_column("details")
    for message in summary.messages:
        for row in _message_rows(message):
            table.add_row(*row)
    for enum in summary.enums:
        table.add_row("enum", enum.full_name, f"{len(enum.values)} values")
    for service in summary.services:
        table.add_row("service", service.full_name, ", ".join(service.methods))
    console.print(table)

    console.print(f"Linked files ({len(summary.linked_files)}):")
    for linked in summary.linked_files:
        marker = "*" if linked == summary.path else " "
        console.print(f" {marker} {linked}")


def inspect(
    path: Annotated[Path, typer.Argument(help="Path to a .proto file.", exists=True, dir_okay=False)],
    package: Annotated[
        str | None, typer.Option(help="Package directory to place the file in (defaults to its declared package).")
    ] = None,
    name: Annotated[
        str | None, typer.Option(help="File name inside the package (defaults to the file's name).")
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the summary as JSON.")] = False,
) -> None:
    """Load a .proto file with its well-known imports and show what it defines."""
    text = path.read_text(encoding="utf-8")
    file_name = name or path.name
    try:
        package_name = package if package is not None else _declared_package(text, file_name)
        result = load_schema(package_name, file_name, text)
    except ProtoLinkError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from e

    summary = result.summary()
    if as_json:
        console.print_json(summary.model_dump_json())
    else:
        _render_summary(summary)
