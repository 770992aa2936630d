"""Output formatting utilities for CLI commands."""

from collections.abc import Sequence

import click


def success(message: str) -> None:
    """Print a success message in green."""
    click.secho(f"✓ {message}", fg="green")


def error(message: str) -> None:
    """Print an error message in red."""
    click.secho(f"✗ {message}", fg="red", err=True)


def warning(message: str) -> None:
    """Print a warning message in yellow."""
    click.secho(f"⚠ {message}", fg="yellow")


def info(message: str) -> None:
    """Print an info message in blue."""
    click.secho(f"ℹ {message}", fg="blue")


def header(message: str) -> None:
    """Print a header message in cyan bold."""
    click.secho(f"\n{message}", fg="cyan", bold=True)


def yes_no(value: bool) -> str:
    return click.style("Yes", fg="green") if value else click.style("No", fg="red")


def table(headers: Sequence[str], rows: Sequence[Sequence[object]]) -> None:
    """Print a plain left-aligned table sized to its content."""
    cells = [[str(h) for h in headers]] + [[str(c) for c in row] for row in rows]
    widths = [max(len(click.unstyle(row[i])) for row in cells) for i in range(len(headers))]

    def line(row: list[str]) -> str:
        padded = [cell + " " * (widths[i] - len(click.unstyle(cell))) for i, cell in enumerate(row)]
        return "  ".join(padded).rstrip()

    click.echo(line(cells[0]))
    click.echo("  ".join("-" * w for w in widths))
    for row in cells[1:]:
        click.echo(line(row))
