"""
DotWatch Action Dispatcher.

Runs the deploy collaborator and reports its outcome without ever
stopping the watch loop.
Requires Python 3.11+.
"""

import sys
from collections.abc import Callable
from typing import Any, TextIO

from utils.logger import LoggerMixin
from watcher.errors import DeployError

DEPLOY_NOTICE = "[DotWatch] Deploying..."


class ActionDispatcher(LoggerMixin):
    """
    Invokes the deploy routine for admitted changes.

    Deploy failures are handed to the error display and swallowed here, so a
    broken deploy never ends the watch session.
    """

    def __init__(
        self,
        deploy: Callable[[Any], None],
        display_error: Callable[[BaseException], None],
        notice: str = DEPLOY_NOTICE,
        stream: TextIO | None = None,
    ) -> None:
        """
        Initialize the dispatcher.

        Args:
            deploy: Deploy routine, raises DeployError on failure
            display_error: Renders an error for the user
            notice: Line printed before every deploy
            stream: Where the notice goes (stdout when None)
        """
        self._deploy = deploy
        self._display_error = display_error
        self._notice = notice
        self._stream = stream
        self.deploy_count = 0
        self.failure_count = 0

    def dispatch(self, options: Any) -> bool:
        """
        Run one deployment synchronously.

        Args:
            options: Resolved options passed through to the deploy routine

        Returns:
            True if the deployment succeeded
        """
        print(self._notice, file=self._stream or sys.stdout, flush=True)
        self.deploy_count += 1

        try:
            self._deploy(options)
        except DeployError as e:
            self.failure_count += 1
            self.log.debug("deploy_failed", error=str(e))
            self._display_error(e)
            return False
        except Exception as e:
            self.failure_count += 1
            self.log.exception("deploy_crashed", error=str(e))
            wrapped = DeployError(f"deployment raised {type(e).__name__}")
            wrapped.__cause__ = e
            self._display_error(wrapped)
            return False

        self.log.debug("deploy_succeeded", deploy_count=self.deploy_count)
        return True
