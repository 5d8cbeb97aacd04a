"""Process-wide loguru configuration.

Library modules never add sinks. They log through the component logger
classes next to the code they describe; entrypoints call
`configure_logging` once at startup.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger

_LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}"


def configure_logging(level: str = "INFO", sink: TextIO | None = None) -> int:
    """Replace loguru's default handler with one text sink.

    Args:
        level: Minimum level name.
        sink: Output stream, stderr by default.

    Returns:
        int: Identifier of the added loguru handler.

    Raises:
        ValueError: Raised when loguru does not know the level name.
    """

    logger.remove()
    return logger.add(sink or sys.stderr, level=level.strip().upper(), format=_LOG_FORMAT)
