"""Logging setup for the ``pis`` logger hierarchy.

Library modules log through ``logging.getLogger(__name__)``; only the
CLI calls :func:`init_logging`, once per process, to attach a Rich
handler writing to stderr.
"""

from __future__ import annotations

import logging

from pis.cli.console import get_rich_console

ROOT_LOGGER: str = "pis"


class LogObjects:
    """Handlers installed by :func:`init_logging`."""

    handlers: list[logging.Handler] = []


def init_logging(level: str = "WARNING") -> logging.Logger:
    """Attach a ``RichHandler`` to the ``pis`` logger at *level*.

    Calling it again replaces the previously installed handler instead
    of stacking a second one.
    """
    rich_console = get_rich_console()
    from rich.logging import RichHandler

    logger = logging.getLogger(ROOT_LOGGER)
    for handler in LogObjects.handlers:
        logger.removeHandler(handler)
    LogObjects.handlers.clear()

    handler = RichHandler(
        console=rich_console,
        show_time=False,
        show_path=level == "DEBUG",
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    LogObjects.handlers.append(handler)

    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    logger.debug('Logger "%s" initialized at %s', ROOT_LOGGER, level)
    return logger
