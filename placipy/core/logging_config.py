"""
Logging setup - called once when the application is created.
Modules log through logging.getLogger(__name__).
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure the root logger and return the application logger."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # pymongo is chatty at DEBUG
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    return logging.getLogger("placipy")
