"""
PrintNode CLI - Three-layer architecture for the PrintNode API.

Layers:
- core: Entities, transport and the low-level API client
- sdk: High-level PrintNodeClient with nice ergonomics
- cli: Opinionated command-line interface
"""

from loguru import logger

from printnode_cli.sdk import PrintNodeClient

logger.disable("printnode_cli")

__version__ = "0.1.0"
__all__ = ["PrintNodeClient"]
