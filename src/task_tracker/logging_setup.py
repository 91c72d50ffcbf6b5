from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


class _ThirdPartyFilter(logging.Filter):
    """
    Keep task_tracker logs at the configured level; let other libraries
    through only from WARNING up.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("task_tracker"):
            return True
        return record.levelno >= logging.WARNING


# PUBLIC_INTERFACE
def setup_logging(level: int = logging.INFO) -> None:
    """
    Configure the root logger with a single stderr handler.

    Safe to call more than once: previously installed handlers are replaced.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
    handler.addFilter(_ThirdPartyFilter())
    root.addHandler(handler)

    logging.captureWarnings(True)
