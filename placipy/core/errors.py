"""
Domain errors raised by services.

Routes translate these into HTTP responses:
- NotFoundError -> 404
- StoreError, JudgeError and anything unexpected -> 500 (message forwarded)
"""


class PlacipyError(Exception):
    """Base class for service-level failures."""


class NotFoundError(PlacipyError):
    """Requested record does not exist."""


class StoreError(PlacipyError):
    """Document store operation failed."""


class JudgeError(PlacipyError):
    """Code execution service failed."""
