"""
Process-wide logging setup. Modules log through logging.getLogger(__name__);
only the entrypoints call setup_logging().
"""

import logging
import sys

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Attach a single stderr handler to the root logger at *level*."""
    root = logging.getLogger()
    if root.handlers:
        root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # httpx logs every request at INFO, which would leak the Finnhub token in URLs.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return root
