# ==============================================================================
# LOGGING SETUP
# ==============================================================================
# All modules log through children of the "pkgexport" logger. A single
# stderr handler is attached; stdout is kept clean for list output.
#
# Usage:
#   from pkgexport.core.log import get_logger, setup_logging
#   setup_logging(verbose=True)
#   logger = get_logger(__name__)
# ==============================================================================

import logging
import sys
from typing import Optional, TextIO

ROOT_LOGGER_NAME = "pkgexport"

_FORMATTER = logging.Formatter("[$levelname] $message", style="$")
_HANDLER: Optional[logging.StreamHandler] = None


def setup_logging(verbose: bool = False, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Attach (or re-attach) the console handler to the package logger.

    Args:
        verbose: Show everything down to DEBUG. When False only errors are
                 shown, everything else is summarized by the progress line.
        stream: Stream to log to (default: sys.stderr)

    Returns:
        The package root logger
    """
    global _HANDLER

    root = logging.getLogger(ROOT_LOGGER_NAME)
    if _HANDLER is not None:
        root.removeHandler(_HANDLER)

    _HANDLER = logging.StreamHandler(stream or sys.stderr)
    _HANDLER.setFormatter(_FORMATTER)
    _HANDLER.setLevel(logging.DEBUG if verbose else logging.ERROR)

    root.addHandler(_HANDLER)
    root.setLevel(logging.DEBUG)
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the package namespace."""
    if not name or name == ROOT_LOGGER_NAME:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
