"""Log handler setup for the ``itmd`` command.

The CLI prints the parsed document as JSON on stdout, so log records go to
stderr.  The pipeline stages (``itmd.markdown``, ``itmd.alerts``,
``itmd.price`` and ``itmd.pipeline.*``) log what they skip or reinterpret at
DEBUG; ``itmd -v`` surfaces those records.  Only the CLI calls
:func:`setup_logging`; code embedding :func:`itmd.process_markdown` keeps
its own handlers.
"""

from __future__ import annotations

import logging
import sys

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Marks handlers added by setup_logging so repeated calls find them again
# without touching handlers installed by the host application.
_HANDLER_ATTR = "_itmd_log_handler"


def setup_logging(level: str = "INFO") -> None:
    """Send itmd log records to stderr at *level*.

    The root logger is used so records from every ``itmd.*`` module share
    one timestamped, pipe-separated line format.  Repeated calls only
    update the level.

    Args:
        level: A standard logging level name (e.g. ``"DEBUG"``,
            ``"INFO"``, ``"WARNING"``).

    Raises:
        ValueError: If *level* is not a recognised logging level string.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level!r}")

    root = logging.getLogger()
    root.setLevel(numeric_level)

    for handler in root.handlers:
        if getattr(handler, _HANDLER_ATTR, False):
            handler.setLevel(numeric_level)
            return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    setattr(handler, _HANDLER_ATTR, True)
    root.addHandler(handler)
