"""
DotWatch Error Display.

Renders an error and its cause chain for the user.
"""

import sys
from typing import TextIO


def format_error(error: BaseException) -> str:
    """Format an error followed by one line per chained cause."""
    lines = [f"Error: {error}"]
    seen = {id(error)}
    cause = error.__cause__ or error.__context__
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        lines.append(f"Caused by: {str(cause) or type(cause).__name__}")
        cause = cause.__cause__ or cause.__context__
    return "\n".join(lines)


def display_error(error: BaseException, stream: TextIO | None = None) -> None:
    """Print an error to stderr."""
    print(format_error(error), file=stream or sys.stderr, flush=True)
