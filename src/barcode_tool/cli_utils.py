"""CLI utility functions and helpers."""

from typing import Iterable

import click

# Global flag for quiet mode
_quiet_mode = False


def set_quiet_mode(quiet: bool) -> None:
    """Set the global quiet mode flag."""
    global _quiet_mode
    _quiet_mode = quiet


def echo(message: str = "", err: bool = False, **kwargs) -> None:
    """Echo wrapper that respects quiet mode."""
    if _quiet_mode and not err:
        return
    click.echo(message, err=err, **kwargs)


def secho(message: str = "", err: bool = False, **kwargs) -> None:
    """Styled echo wrapper that respects quiet mode."""
    if _quiet_mode and not err:
        return
    click.secho(message, err=err, **kwargs)


def echo_list(items: Iterable[str], output=None) -> None:
    """Print one item per line, or write them to a file when given."""
    items = list(items)
    if output:
        with open(output, 'w') as f:
            for item in items:
                f.write(f"{item}\n")
        echo(f"Wrote {len(items)} entries to {output}")
    else:
        # Lists are the command's result, printed even in quiet mode
        for item in items:
            click.echo(item)
