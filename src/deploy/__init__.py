"""
DotWatch Deploy Package.

Default deploy routine and error display used by the watch loop.
Requires Python 3.11+.
"""

from deploy.command import run_deploy_command
from deploy.display import display_error, format_error

__all__ = ["run_deploy_command", "display_error", "format_error"]
