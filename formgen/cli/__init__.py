"""Command-line interface for formgen."""

import rich_click as click

from .. import __version__
from ..config import get_settings
from ..core.logging import bind_context, configure_logging
from .describe import describe_command
from .render import render_command
from .validate import validate_command

# Configure rich-click styling
click.rich_click.TEXT_MARKUP = "rich"
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.STYLE_OPTION = "bold cyan"
click.rich_click.STYLE_ARGUMENT = "bold yellow"
click.rich_click.STYLE_COMMAND = "bold green"
click.rich_click.STYLE_SWITCH = "bold blue"


@click.group(name="formgen")
@click.version_option(version=__version__, prog_name="formgen")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Log level (defaults to FORMGEN_LOG_LEVEL)",
)
@click.pass_context
def main(ctx: click.Context, log_level: str | None) -> None:
    """🧾 **formgen** - HTML forms from Pydantic schemas.

    Describe the fields of a schema, render its form, and validate
    submissions against the same schema.
    """
    settings = get_settings()
    configure_logging(
        environment=settings.environment,
        log_level=log_level or settings.log_level,
        json_logs=settings.json_logs,
    )
    bind_context(command=ctx.invoked_subcommand)


# Add commands to the group
main.add_command(describe_command)
main.add_command(render_command)
main.add_command(validate_command)


if __name__ == "__main__":
    main()


__all__ = ["main"]
