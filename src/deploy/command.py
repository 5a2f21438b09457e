"""
DotWatch Deploy Command.

Runs the configured deploy command in the watch root.
Requires Python 3.11+.
"""

import shlex
import subprocess

from utils.config import Settings
from utils.logger import get_logger
from watcher.errors import DeployError

logger = get_logger("deploy.command")


def run_deploy_command(settings: Settings) -> None:
    """
    Run the deploy command and wait for it to finish.

    The command inherits stdout and stderr, so its own output reaches the
    user directly.

    Args:
        settings: Resolved settings holding the command and watch root

    Raises:
        DeployError: If the command cannot start, times out or exits non-zero
    """
    command = settings.deploy.command
    display = shlex.join(command)
    logger.debug("deploy_command_started", command=display, cwd=str(settings.watch_root))

    try:
        result = subprocess.run(
            command,
            cwd=settings.watch_root,
            timeout=settings.deploy.timeout_seconds,
            check=False,
        )
    except FileNotFoundError as e:
        raise DeployError(f"deploy command not found: {command[0]}") from e
    except subprocess.TimeoutExpired as e:
        raise DeployError(
            f"deploy command timed out after {settings.deploy.timeout_seconds}s: {display}"
        ) from e
    except OSError as e:
        raise DeployError(f"cannot run deploy command: {display}") from e

    if result.returncode != 0:
        raise DeployError(f"deploy command exited with code {result.returncode}: {display}")

    logger.debug("deploy_command_finished", command=display)
