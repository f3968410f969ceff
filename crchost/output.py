"""Writing user-facing output."""

from __future__ import annotations

import sys
from typing import Any, TextIO


def out(*args: Any) -> None:
    """Print the arguments separated by spaces, followed by a newline."""
    print(*args)


def out_f(fmt: str, *args: Any) -> None:
    """Print a %-style formatted string without adding a newline."""
    sys.stdout.write(fmt % args if args else fmt)


def out_w(stream: TextIO, *args: Any) -> int:
    """Write the arguments as one line to ``stream``; return the count written."""
    line = " ".join(str(arg) for arg in args) + "\n"
    written = stream.write(line)
    return len(line) if written is None else written