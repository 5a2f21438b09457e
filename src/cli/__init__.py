"""
DotWatch Command-Line Interface.

Requires Python 3.11+.
"""

from cli.main import build_parser, build_settings, main, run

__all__ = ["build_parser", "build_settings", "main", "run"]
