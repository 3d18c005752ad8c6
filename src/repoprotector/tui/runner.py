"""Seam between the CLI and the Textual event loop.

The CLI hands the app it built to a TuiRunner; tests swap in FakeTuiRunner
to inspect that app without entering full-screen mode.
"""

import logging
from abc import ABC, abstractmethod

from repoprotector.tui.app import RepoProtectorApp

logger = logging.getLogger(__name__)


class TuiRunner(ABC):
    """Runs a RepoProtectorApp to completion."""

    @abstractmethod
    def run(self, app: RepoProtectorApp) -> None: ...


class RealTuiRunner(TuiRunner):
    """Blocks in the Textual event loop until the user quits."""

    def run(self, app: RepoProtectorApp) -> None:
        logger.debug("Starting TUI (local_mode=%s)", app.local_mode)
        app.run()
        logger.debug("TUI exited on screen %s", app.controller.state.screen.value)


class FakeTuiRunner(TuiRunner):
    """Records each app it is given and returns immediately."""

    def __init__(self) -> None:
        self._apps_run: list[RepoProtectorApp] = []

    def run(self, app: RepoProtectorApp) -> None:
        self._apps_run.append(app)

    @property
    def apps_run(self) -> list[RepoProtectorApp]:
        """Apps passed to run(), oldest first. For test assertions only."""
        return self._apps_run
