"""
Loguru logging setup for the CLI.

The library itself is silent: printnode_cli disables its own logger on
import, and only setup_logging() turns it back on.
"""

import sys

from loguru import logger


def setup_logging(log_level: str = "DEBUG") -> None:
    logger.remove()

    logger.add(
        sys.stderr,
        level=log_level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
               "<level>{level: <8}</level> | "
               "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
               "<level>{message}</level>",
    )
    logger.enable("printnode_cli")
