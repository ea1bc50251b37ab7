"""
Main CLI entry point using Typer.

This module defines the command-line interface for layout-schema using Typer.
It provides three commands: compile, inspect, and validate.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from .commands import compile_command, inspect_command, validate_command
from .display import print_error


# Create Typer app
app = typer.Typer(
    name="layout-schema",
    help="layout-schema - JSON Schemas for slide content, compiled from layout code",
    add_completion=False,
    rich_markup_mode="rich"
)


SourceArgument = Annotated[
    Path,
    typer.Argument(help="Path to the layout source file", exists=True, file_okay=True, dir_okay=False)
]
ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to a compiler config JSON file", exists=True, file_okay=True, dir_okay=False)
]


@app.command("compile")
def compile_(
    source: SourceArgument,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Path to save the compiled schema")
    ] = None,
    config: ConfigOption = None,
    metadata: Annotated[
        bool,
        typer.Option("--metadata", "-m", help="Emit the layout record (id, name, description, json_schema)")
    ] = False,
    response_schema: Annotated[
        bool,
        typer.Option("--response-schema", help="Apply the structured-output response transforms")
    ] = False,
    raw: Annotated[
        bool,
        typer.Option("--raw", help="Print plain JSON only")
    ] = False,
) -> None:
    """
    Compile the schema declared in a layout source.

    Example:
        layout-schema compile layouts/TitleCards.tsx \\
            --metadata \\
            --output title-cards.json
    """
    try:
        compile_command(
            source_path=source,
            output_path=output,
            config_path=config,
            metadata=metadata,
            response_schema=response_schema,
            raw=raw
        )
    except Exception as e:
        print_error(f"Command failed: {e}")
        raise typer.Exit(code=1)


@app.command("inspect")
def inspect(
    source: SourceArgument,
    config: ConfigOption = None,
    show_schema: Annotated[
        bool,
        typer.Option("--show-schema", help="Display the compiled schema")
    ] = False,
) -> None:
    """
    Show the declarations found in a layout source and how they compile.

    Example:
        layout-schema inspect layouts/TitleCards.tsx --show-schema
    """
    try:
        inspect_command(source_path=source, config_path=config, show_schema=show_schema)
    except Exception as e:
        print_error(f"Command failed: {e}")
        raise typer.Exit(code=1)


@app.command("validate")
def validate(
    json_file: Annotated[
        Path,
        typer.Option("--json", "-j", help="Path to generated content (JSON)", exists=True, file_okay=True, dir_okay=False)
    ],
    source: Annotated[
        Path,
        typer.Option("--source", "-s", help="Path to the layout source", exists=True, file_okay=True, dir_okay=False)
    ],
    config: ConfigOption = None,
    response_schema: Annotated[
        bool,
        typer.Option("--response-schema", help="Validate against the structured-output response schema")
    ] = False,
    show_schema: Annotated[
        bool,
        typer.Option("--show-schema", help="Display the schema")
    ] = False,
) -> None:
    """
    Validate generated content against a layout's compiled schema.

    Example:
        layout-schema validate \\
            --json slide-3.json \\
            --source layouts/TitleCards.tsx
    """
    try:
        validate_command(
            json_path=json_file,
            source_path=source,
            config_path=config,
            response_schema=response_schema,
            show_schema=show_schema
        )
    except Exception as e:
        print_error(f"Command failed: {e}")
        raise typer.Exit(code=1)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit")
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log compiler recovery details")
    ] = False,
) -> None:
    """
    layout-schema - JSON Schemas for slide content, compiled from layout code.
    """
    if version:
        from layout_schema import __version__
        typer.echo(f"layout-schema version {__version__}")
        raise typer.Exit()

    if verbose:
        from layout_schema.utils import setup_logging
        setup_logging(logging.DEBUG)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def cli() -> None:
    """CLI entry point for the console script."""
    app()


if __name__ == "__main__":
    cli()
