"""Console logging for the command-line interface."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Route the package's log records to a Rich console handler on stderr.

    Args:
        verbose: Log at DEBUG instead of INFO

    Returns:
        The package logger
    """
    logger = logging.getLogger("gql_typegen")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_time=False,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    return logger
