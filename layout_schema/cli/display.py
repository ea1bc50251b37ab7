"""
Rich terminal display utilities for CLI.

Provides formatted output using the Rich library for:
- Syntax-highlighted schema documents
- Declaration tables
- Diagnostics and document problems
- Validation errors with fix suggestions
"""

import json
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from layout_schema.schema.diagnostics import Diagnostic
from layout_schema.validation import ValidationError, suggest_fix


console = Console()


def _mark(symbol: str, style: str, message: str) -> None:
    console.print(f"[{style}]{symbol}[/{style}] {message}")


def print_header(title: str) -> None:
    """Print a command banner."""
    console.print()
    console.rule(f"[bold cyan]{title}[/bold cyan]", align="left")
    console.print()


def print_success(message: str) -> None:
    _mark("✓", "green", message)


def print_error(message: str) -> None:
    _mark("✗", "red", message)


def print_warning(message: str) -> None:
    _mark("⚠", "yellow", message)


def print_info(message: str) -> None:
    _mark("ℹ", "blue", message)


def print_json(data: Any, title: Optional[str] = None) -> None:
    """
    Print JSON data with syntax highlighting.

    Args:
        data: JSON-serializable data or JSON string
        title: Optional title for the panel
    """
    json_str = data if isinstance(data, str) else json.dumps(data, indent=2)
    syntax = Syntax(json_str, "json", theme="monokai", line_numbers=False)

    if title:
        console.print(Panel(syntax, title=f"[bold]{title}[/bold]", border_style="cyan"))
    else:
        console.print(syntax)


def print_declarations(declarations: Dict[str, str], main_name: Optional[str]) -> None:
    """
    Print the declaration table, marking the entry point.

    Args:
        declarations: Declaration name to expression text
        main_name: Name of the selected entry point
    """
    table = Table(title="Declarations", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Name", style="cyan", width=28)
    table.add_column("Entry", justify="center", width=6)
    table.add_column("Length", justify="right", width=8)
    table.add_column("Expression", style="white", width=50)

    for i, (name, text) in enumerate(declarations.items(), 1):
        flat = " ".join(text.split())
        preview = flat[:47] + "..." if len(flat) > 50 else flat
        entry = "[green]★[/green]" if name == main_name else ""
        table.add_row(str(i), name, entry, str(len(text)), preview)

    console.print()
    console.print(table)
    console.print()


def print_diagnostics(diagnostics: List[Diagnostic]) -> None:
    """Print recovery events recorded during compilation."""
    if not diagnostics:
        print_success("No recovery needed")
        return

    table = Table(title="Diagnostics", show_header=True, header_style="bold yellow")
    table.add_column("Kind", style="yellow", width=22)
    table.add_column("Declaration", style="cyan", width=20)
    table.add_column("Message", style="white", width=50)

    for diagnostic in diagnostics:
        table.add_row(diagnostic.kind.value, diagnostic.name or "-", diagnostic.message)

    console.print()
    console.print(table)
    console.print()


def print_problems(problems: List[str]) -> None:
    """Print problems reported by check_document()."""
    if not problems:
        print_success("Schema is usable for strict structured output")
        return

    console.print()
    console.print("[bold red]Schema Problems:[/bold red]")
    for problem in problems:
        console.print(f"  [red]•[/red] {problem}")
    console.print()


def print_validation_errors(errors: List[ValidationError]) -> None:
    """
    Print validation errors with a suggested fix for each.

    Args:
        errors: Validation errors from validate()
    """
    if not errors:
        return

    console.print()
    console.print("[bold red]Validation Errors:[/bold red]")
    for error in errors:
        console.print(f"  [red]•[/red] {error.path}: {error.message}")
        console.print(f"    [dim]{suggest_fix(error)}[/dim]")
    console.print()


def print_separator() -> None:
    console.rule(style="dim")
