"""
Logging Setup

The sandbox logs through loguru. As a library it stays silent until the
application opts in with `configure_logging`, which the CLI does.
"""

import sys

from loguru import logger

LOG_FORMAT = "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <7}</level> | {message}"


def configure_logging(level: str = "INFO", sink=sys.stderr) -> None:
    """
    Enable sandbox logs at `level` on `sink`.

    Replaces previously added loguru handlers; calling it again just
    switches the level.
    """
    logger.remove()
    logger.add(sink, level=level.upper(), format=LOG_FORMAT, backtrace=True, diagnose=False)
    logger.enable("ledger_sandbox")


def disable_logging() -> None:
    """Silence sandbox logs again, keeping the handlers in place."""
    logger.disable("ledger_sandbox")
