"""Rich console output utilities for run-wasm.

Progress goes to stdout, fatal errors to stderr. Both consoles honour the
NO_COLOR environment variable.
"""

from __future__ import annotations

import os
from typing import Any

from rich.console import Console

# Rich respects NO_COLOR itself; force_terminal has to be set from it here
_force_no_color = os.environ.get("NO_COLOR") is not None


def create_console(no_color: bool = False, *, stderr: bool = False) -> Console:
    """Create a Rich Console instance with appropriate color settings.

    Args:
        no_color: If True, disable colored output. Also respects NO_COLOR env var.
        stderr: Write to stderr instead of stdout.

    Returns:
        Configured Console instance.
    """
    force_terminal = None
    if no_color or _force_no_color:
        force_terminal = False
    return Console(
        force_terminal=force_terminal,
        no_color=no_color or _force_no_color,
        stderr=stderr,
    )


console = create_console()
err_console = create_console(stderr=True)


def success(message: str, **kwargs: Any) -> None:
    """Print a success message with green checkmark.

    Example:
        >>> success("Built `demo` into target/wasm-examples/demo")
        ✓ Built `demo` into target/wasm-examples/demo
    """
    console.print(f"[green]✓[/green] {message}", **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print a fatal error to stderr with red X.

    Example:
        >>> error("WASM artifact not found: target/.../demo.wasm")
        ✗ WASM artifact not found: target/.../demo.wasm
    """
    err_console.print(f"[red]✗[/red] {message}", **kwargs)


def info(message: str, **kwargs: Any) -> None:
    """Print an informational message."""
    console.print(message, **kwargs)


def usage_error(cause: str, usage: str) -> None:
    """Print a command line error followed by the usage text.

    Both go to stdout verbatim, separated by a blank line, so brackets such
    as ``[OPTIONS]`` are not read as markup.
    """
    console.print(f"{cause}\n\n{usage}", markup=False, highlight=False)
