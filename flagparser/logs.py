"""
Logging helpers for the flagparser namespace.

The library never configures the root logger. Every module asks for a child of
the "flagparser" logger through getLogger(), which carries a NullHandler so
parsing is silent unless a host opts in with enable().
"""
import logging

from rich.console import Console
from rich.logging import RichHandler

ROOT = "flagparser"

logging.getLogger(ROOT).addHandler(logging.NullHandler())


def getLogger(name=None, /):
    """
    return a logger under the "flagparser" namespace.

    module names already inside the package are used as-is; anything else is
    nested beneath the namespace ("stages" -> "flagparser.stages").
    """
    if not name or name == ROOT:
        return logging.getLogger(ROOT)
    if name.startswith(ROOT + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT}.{name}")


def enable(level=logging.DEBUG, /, *, console=None):
    """
    attach a rich handler to the namespace logger and set its level.

    calling enable() more than once replaces the previously attached rich
    handler instead of stacking duplicates. returns the namespace logger.
    """
    logger = logging.getLogger(ROOT)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


__all__ = (
    "getLogger",
    "enable",
)
