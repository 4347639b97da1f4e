"""User-facing error messages, written to stderr."""

from rich.console import Console

_console = Console(stderr=True, highlight=False)


def report(message: str) -> None:
    """Print a plain-text message for the person running the shell."""
    _console.print(message, markup=False, emoji=False, soft_wrap=True)
    _console.file.flush()
