"""Rich-based terminal output for CStyleIQ."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

__all__ = [
    "console",
    "SEVERITY_STYLE",
    "print_success",
    "print_warning",
    "print_error",
    "print_info",
    "print_violation",
    "create_table",
]

_THEME = Theme(
    {
        "success": "bold green",
        "warning": "bold yellow",
        "error": "bold red",
        "info": "bold cyan",
        "muted": "dim",
        "accent": "bold magenta",
    }
)

SEVERITY_STYLE: dict[str, str] = {"ERROR": "red", "WARNING": "yellow", "INFO": "cyan"}

console = Console(theme=_THEME)


def print_success(message: str) -> None:
    """Print a success message with a checkmark."""
    console.print(f"[success]✔[/success] {message}")


def print_warning(message: str) -> None:
    """Print a warning message with a caution sign."""
    console.print(f"[warning]⚠[/warning] {message}")


def print_error(message: str) -> None:
    """Print an error message with a cross."""
    console.print(f"[error]✖[/error] {message}")


def print_info(message: str) -> None:
    console.print(f"[info]ℹ[/info] {message}")


def print_violation(line: str, severity: str) -> None:
    """Print one ``path:line:col: [rule] message`` line, unwrapped, coloured by severity."""
    console.print(line, style=SEVERITY_STYLE.get(severity, "white"), markup=False, highlight=False, soft_wrap=True)


def create_table(
    title: str,
    columns: list[tuple[str, str]],
    rows: list[list[str]],
) -> Table:
    """Create a Rich table with the given columns and rows."""
    table = Table(title=title, show_lines=True, expand=True)
    for header, style in columns:
        table.add_column(header, style=style)
    for row in rows:
        table.add_row(*row)
    return table
