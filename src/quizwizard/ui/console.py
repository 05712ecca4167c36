"""Shared consoles and logging setup for the quizwizard CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from quizwizard.ui.theme import THEME

_CONSOLE = Console(theme=THEME, highlight=False)
_ERR_CONSOLE = Console(theme=THEME, highlight=False, stderr=True)


def get_console() -> Console:
    return _CONSOLE


def configure_logging(verbose: bool = False) -> None:
    handler = RichHandler(
        console=_ERR_CONSOLE,
        show_time=False,
        show_path=verbose,
        markup=False,
        rich_tracebacks=verbose,
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )
