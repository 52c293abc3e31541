"""CLI render command: generate a form from a schema."""

from pathlib import Path
import sys

from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
import rich_click as click

from ..config import FormOptions
from ..core.schema import SchemaIntrospectionError
from ..render.form import generate_form
from .loader import LoadError, load_mapping, load_schema

console = Console()


@click.command("render")
@click.argument("schema")
@click.option(
    "--options",
    "options_file",
    type=click.Path(dir_okay=False),
    help="⚙️ **Form options** file (YAML or JSON)",
)
@click.option(
    "--values",
    "values_file",
    type=click.Path(dir_okay=False),
    help="📝 **Initial values** file (YAML or JSON)",
)
@click.option(
    "--theme",
    type=click.Choice(["dark", "light"]),
    help="🎨 **Theme** overriding the options file",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False),
    help="📁 **Write form.html, form.css and form.js** into this directory",
)
def render_command(
    schema: str,
    options_file: str | None,
    values_file: str | None,
    theme: str | None,
    output_dir: str | None,
) -> None:
    """🧩 **Render an HTML form for a schema**

    SCHEMA is `module:Model` or `path/to/file.py:Model`. Without
    `--output-dir` the complete form (markup, styles and script) is
    printed to stdout.

    **Examples:**

    ```bash
    formgen render app.forms:Signup
    formgen render forms.py:Signup --options signup.yaml -o build/
    ```

    **Exit Codes:**
    - `0`: Form rendered ✅
    - `2`: Schema, options or values could not be loaded ⚠️
    """
    try:
        schema_class = load_schema(schema)
        raw_options = load_mapping(options_file) if options_file else {}
        if theme:
            raw_options["theme"] = theme
        options = FormOptions.from_settings(**raw_options)
        values = load_mapping(values_file) if values_file else None
        form = generate_form(schema_class, options, values=values)
    except (LoadError, SchemaIntrospectionError, PydanticValidationError) as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(2)

    if output_dir is None:
        click.echo(form.document())
        return

    target = Path(output_dir)
    target.mkdir(parents=True, exist_ok=True)
    (target / "form.css").write_text(form.styles, encoding="utf-8")
    (target / "form.js").write_text(form.script, encoding="utf-8")
    (target / "form.html").write_text(
        "\n".join(
            [
                '<link rel="stylesheet" href="form.css">',
                form.markup,
                '<script src="form.js"></script>' if form.script else "",
            ]
        ),
        encoding="utf-8",
    )

    if console.is_terminal:
        console.print(f"✅ [bold green]Form written to[/bold green] [cyan]{target}[/cyan]")
        console.print(
            f"   [dim]{len(form.descriptors)} fields, {len(form.bindings)} behavior bindings[/dim]"
        )
    else:
        click.echo(f"✅ Form written to {target}")
