"""CLI describe command: show the field descriptors of a schema."""

import json
import sys

from rich.console import Console
from rich.table import Table
import rich_click as click

from ..core.mapper import map_schema
from ..core.schema import FieldDescriptor, SchemaIntrospectionError
from .loader import LoadError, load_schema

console = Console()


def _constraint_summary(descriptor: FieldDescriptor) -> str:
    data = descriptor.constraints.to_dict()
    data.pop("required")
    return ", ".join(f"{key}={value}" for key, value in data.items())


def _kind_label(descriptor: FieldDescriptor) -> str:
    if descriptor.discriminator is None:
        return descriptor.effective_kind
    return f"{descriptor.effective_kind} (option {descriptor.discriminator + 1})"


@click.command("describe")
@click.argument("schema")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="📋 **Output format** for the descriptors",
    show_default=True,
)
def describe_command(schema: str, output_format: str) -> None:
    """🔎 **Describe the form fields of a schema**

    SCHEMA is `module:Model` or `path/to/file.py:Model`.

    **Exit Codes:**
    - `0`: Schema described ✅
    - `2`: Schema could not be loaded or introspected ⚠️
    """
    try:
        descriptors = map_schema(load_schema(schema))
    except (LoadError, SchemaIntrospectionError) as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(2)

    if output_format == "json":
        payload = [descriptor.to_dict() for descriptor in descriptors.values()]
        click.echo(json.dumps(payload, indent=2, default=str))
        return

    rows = [
        (
            descriptor.path,
            _kind_label(descriptor),
            "yes" if descriptor.constraints.required else "no",
            _constraint_summary(descriptor),
        )
        for top in descriptors.values()
        for descriptor in top.walk()
    ]

    if console.is_terminal:
        table = Table(title=f"Fields of {schema}")
        table.add_column("Path", style="cyan")
        table.add_column("Kind", style="magenta")
        table.add_column("Required")
        table.add_column("Constraints", style="dim")
        for row in rows:
            table.add_row(*row)
        console.print(table)
    else:
        for path, kind, required, constraints in rows:
            line = f"{path}\t{kind}\trequired={required}"
            click.echo(f"{line}\t{constraints}" if constraints else line)
