"""Console output helpers for the PyCMS CLI."""

from typing import Optional

import click


class OutputFormatter:
    """Line-based console sink used by all commands.

    Errors and warnings go to stderr, everything else to stdout. When
    ``quiet`` is set, informational messages are suppressed but errors and
    explicit ``print`` calls still appear.
    """

    def __init__(self, quiet: bool = False, color: Optional[bool] = None):
        self.quiet = quiet
        self.color = color

    def print(self, message: str = "") -> None:
        click.echo(message, color=self.color)

    def info(self, message: str) -> None:
        if not self.quiet:
            click.echo(message, color=self.color)

    def success(self, message: str) -> None:
        if not self.quiet:
            click.secho(message, fg="green", color=self.color)

    def warning(self, message: str) -> None:
        click.secho(message, fg="yellow", err=True, color=self.color)

    def error(self, message: str) -> None:
        click.secho(message, fg="red", err=True, color=self.color)

    def print_summary(self, title: str, items: list[tuple[str, str]]) -> None:
        """Print a titled block of ``label: value`` lines.

        Args:
            title: Summary heading
            items: List of (label, value) tuples
        """
        if self.quiet:
            return
        self.print("")
        click.secho(title, bold=True, color=self.color)
        click.echo("-" * len(title), color=self.color)
        width = max((len(label) for label, _ in items), default=0)
        for label, value in items:
            click.echo(f"{label + ':':<{width + 1}} {value}", color=self.color)
