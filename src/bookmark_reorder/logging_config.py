"""Logging configuration for bookmark-reorder."""

import sys
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger

# Every component logs through logger.bind(component=...); unbound records fall back to this.
_DEFAULT_EXTRA = {"component": "cli"}


def component_logger(name: str) -> "Logger":
    """Return the logger a component uses when none is injected."""
    return logger.bind(component=name)


def configure_logging(*, verbose: bool = False) -> None:
    """Configure loguru with appropriate level.

    Debug output includes the emitting component so drag sessions can be
    followed across the controller, executor and model.
    """
    logger.remove()
    logger.configure(extra=_DEFAULT_EXTRA)
    if verbose:
        logger.add(sys.stderr, level="DEBUG", format="{level.icon} [{extra[component]}] {message}")
    else:
        logger.add(sys.stderr, level="INFO", format="{level.icon} {message}")
