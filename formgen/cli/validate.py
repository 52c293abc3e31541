"""CLI validate command: validate data against a schema.

Output formats follow the rest of the CLI: a rich table for interactive
terminals, plain lines otherwise, and JSON for tooling.
"""

import json
import sys
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.table import Table
import rich_click as click

from ..core.schema import SchemaIntrospectionError
from ..validation.bridge import ValidationBridge
from ..validation.errors import FieldValidationResult, ValidationResult
from .loader import LoadError, load_mapping, load_schema

console = Console()


def _output_result(result: ValidationResult, output_format: str) -> None:
    if output_format == "json":
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if not console.is_terminal:
        click.echo(str(result))
        return

    if result.valid:
        console.print("✅ [bold green]Validation successful[/bold green]")
        return

    console.print(
        f"❌ [bold red]Validation failed[/bold red] ({result.error_count} errors)"
    )
    table = Table(show_header=True, header_style="bold")
    table.add_column("Field", style="yellow")
    table.add_column("Message", style="red")
    for path, message in result.errors_by_path.items():
        table.add_row(path, message)
    console.print(table)


def _output_field_result(result: FieldValidationResult, output_format: str) -> None:
    if output_format == "json":
        click.echo(json.dumps(result.to_dict(), indent=2))
    elif result.valid:
        click.echo(f"✅ {result.path}: valid")
    else:
        click.echo(f"❌ {result.path}: {result.message}")


@click.command("validate")
@click.argument("schema")
@click.argument("data", required=False, type=click.Path(dir_okay=False))
@click.option(
    "--field",
    "field_path",
    metavar="PATH",
    help="🎯 **Validate a single field** instead of a whole submission",
)
@click.option("--value", help="Value for `--field`")
@click.option(
    "--options",
    "options_file",
    type=click.Path(dir_okay=False),
    help="⚙️ **Form options** file whose conditional logic applies",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="📋 **Output format** for validation results",
    show_default=True,
)
def validate_command(
    schema: str,
    data: str | None,
    field_path: str | None,
    value: str | None,
    options_file: str | None,
    output_format: str,
) -> None:
    """🔍 **Validate submitted data against a schema**

    SCHEMA is `module:Model` or `path/to/file.py:Model`; DATA is a YAML or
    JSON file with flat (`address.street`) or nested keys.

    **Examples:**

    ```bash
    formgen validate forms.py:Signup submission.json
    formgen validate forms.py:Signup --field name --value J
    ```

    **Exit Codes:**
    - `0`: Validation successful ✅
    - `1`: Validation failed ❌
    - `2`: Schema or data could not be loaded, or invalid arguments ⚠️
    """
    try:
        schema_class = load_schema(schema)
        options: dict[str, Any] = load_mapping(options_file) if options_file else {}
        rules = options.get("conditionalLogic") or options.get("conditional_logic")
        bridge = ValidationBridge(schema_class, rules=rules)

        if field_path is not None:
            result = bridge.validate_field(field_path, value)
        elif data is not None:
            submission = load_mapping(data)
        else:
            raise click.UsageError("Provide a DATA file or --field")
    except (LoadError, SchemaIntrospectionError, PydanticValidationError, KeyError) as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(2)

    if field_path is not None:
        _output_field_result(result, output_format)
        sys.exit(0 if result.valid else 1)

    full_result = bridge.validate(submission)
    _output_result(full_result, output_format)
    sys.exit(0 if full_result.valid else 1)
