"""
DotWatch Command-Line Entry Point.

Watches a dotfiles repository and redeploys it whenever a tracked file
changes.
Requires Python 3.11+.

Usage:
    dotwatch [PATH] [--command "dotter deploy"] [-v]
"""

import argparse
import asyncio
import shlex
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from watchdog.observers import Observer

from deploy.command import run_deploy_command
from deploy.display import display_error
from utils.config import DeploySettings, LoggingSettings, Settings, WatcherSettings
from utils.logger import configure_logging, get_logger
from watcher.debouncer import Debouncer
from watcher.dispatcher import ActionDispatcher
from watcher.errors import FilterConstructionError, MainLoopError
from watcher.event_loop import EventLoop
from watcher.exclusion import ExclusionFilter

logger = get_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="dotwatch",
        description="Redeploy dotfiles whenever a file in the repository changes",
    )
    parser.add_argument(
        "path",
        type=Path,
        nargs="?",
        default=None,
        help="Directory to watch (default: current directory)",
    )
    parser.add_argument(
        "--cache-directory",
        type=Path,
        default=None,
        help="Deployment cache directory, ignored by the watcher",
    )
    parser.add_argument(
        "--cache-file",
        type=Path,
        default=None,
        help="Deployment cache file, ignored by the watcher",
    )
    parser.add_argument(
        "--debounce-ms",
        type=int,
        default=None,
        help="Minimum milliseconds between two deploys",
    )
    parser.add_argument(
        "--command",
        default=None,
        help='Deploy command (default: "dotter deploy")',
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Abort a deploy after this many seconds",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every detected change",
    )
    verbosity.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log warnings and errors",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Write logs as JSON lines",
    )
    return parser


def build_settings(args: argparse.Namespace, base: Settings | None = None) -> Settings:
    """
    Apply command-line overrides on top of environment settings.

    Args:
        args: Parsed arguments
        base: Settings to override (loaded from the environment when None)

    Returns:
        New settings instance

    Raises:
        ValidationError: If an override is out of range
    """
    settings = base or Settings()

    watcher_updates: dict[str, Any] = {}
    if args.path is not None:
        watcher_updates["root"] = args.path
    if args.cache_directory is not None:
        watcher_updates["cache_directory"] = args.cache_directory
    if args.cache_file is not None:
        watcher_updates["cache_file"] = args.cache_file
    if args.debounce_ms is not None:
        watcher_updates["debounce_delay_ms"] = args.debounce_ms

    deploy_updates: dict[str, Any] = {}
    if args.command is not None:
        deploy_updates["command"] = shlex.split(args.command)
    if args.timeout is not None:
        deploy_updates["timeout_seconds"] = args.timeout

    logging_updates: dict[str, Any] = {}
    if args.verbose:
        logging_updates["level"] = "DEBUG"
    elif args.quiet:
        logging_updates["level"] = "WARNING"
    if args.json_logs:
        logging_updates["format"] = "json"

    # Revalidate so overrides obey the same bounds as environment values
    return settings.model_copy(
        update={
            "watcher": WatcherSettings.model_validate(
                {**settings.watcher.model_dump(), **watcher_updates}
            ),
            "deploy": DeploySettings.model_validate(
                {**settings.deploy.model_dump(), **deploy_updates}
            ),
            "logging": LoggingSettings.model_validate(
                {**settings.logging.model_dump(), **logging_updates}
            ),
        }
    )


def run(
    settings: Settings,
    deploy: Callable[[Settings], None] = run_deploy_command,
    observer_factory: Callable[[], Any] = Observer,
) -> int:
    """
    Build the watch pipeline and run it until terminated.

    Returns:
        Process exit code
    """
    try:
        exclusion_filter = ExclusionFilter.build(
            settings.watcher.cache_directory,
            settings.watcher.cache_file,
            root=settings.watch_root,
        )
    except FilterConstructionError as e:
        display_error(e)
        return 1

    loop = EventLoop(
        settings,
        exclusion_filter=exclusion_filter,
        debouncer=Debouncer(window_ms=settings.watcher.debounce_delay_ms),
        dispatcher=ActionDispatcher(deploy=deploy, display_error=display_error),
        observer_factory=observer_factory,
    )

    try:
        asyncio.run(loop.run())
    except MainLoopError as e:
        logger.error("main_loop_failed", error=str(e))
        display_error(e)
        return 1

    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = build_settings(args)
    except ValueError as e:
        parser.error(str(e))

    configure_logging(settings)
    return run(settings)


if __name__ == "__main__":
    raise SystemExit(main())
