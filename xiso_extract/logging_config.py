"""
Logging configuration for the Xbox disc image extraction utility.

One package logger ('xiso_extract') with child loggers per module.
Verbosity is chosen on the command line with -q / -v.
"""

import logging
import os
import sys
from typing import TextIO

# Log levels for the application
QUIET = logging.WARNING
NORMAL = logging.INFO
VERBOSE = logging.DEBUG

logger = logging.getLogger('xiso_extract')


class ColorFormatter(logging.Formatter):
    """
    Formatter that colours the level name on capable terminals.

    Plain text is used when the stream is not a tty.
    """

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, fmt: str | None = None, stream: TextIO | None = None,
                 use_colors: bool = True):
        super().__init__(fmt)
        self.use_colors = use_colors and _is_tty(stream or sys.stderr)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = self.COLORS.get(record.levelname)
        if self.use_colors and color:
            return f"{color}{message}{self.RESET}"
        return message


def _is_tty(stream: TextIO) -> bool:
    """Check if the stream is an interactive terminal."""
    try:
        tty = stream.isatty()
    except (AttributeError, ValueError):
        return False
    if sys.platform == 'win32':
        return tty and 'TERM' in os.environ
    return tty


def setup_logging(
    level: int = NORMAL,
    stream: TextIO | None = None,
    use_colors: bool = True,
    format_string: str | None = None
) -> None:
    """
    Configure the package logger.

    Args:
        level: Logging level (QUIET, NORMAL, or VERBOSE)
        stream: Output stream (defaults to stderr)
        use_colors: Whether to use coloured output
        format_string: Custom format string (optional)
    """
    if stream is None:
        stream = sys.stderr

    if format_string is None:
        if level <= logging.DEBUG:
            format_string = '%(levelname)s: %(name)s: %(message)s'
        else:
            format_string = '%(message)s'

    logger.handlers.clear()

    handler = logging.StreamHandler(stream)
    handler.setFormatter(ColorFormatter(format_string, stream, use_colors))

    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a logger for a specific module.

    Args:
        name: Module name, e.g. 'directory' (package logger if omitted)
    """
    if name is None:
        return logger
    return logger.getChild(name)
