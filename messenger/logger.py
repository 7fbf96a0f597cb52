import logging
import sys

from messenger.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logger(level: str = None) -> logging.Logger:
    """Configure the ``messenger`` logger once; repeated calls only adjust the level."""
    root = logging.getLogger("messenger")
    root.setLevel((level or settings.LOG_LEVEL).upper())

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.propagate = False

    return root
