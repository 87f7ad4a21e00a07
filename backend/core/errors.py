"""Error kinds raised by the scheduling layer.

Routes translate these into HTTP responses; library code never turns them
into empty results.
"""


class SchedulingError(Exception):
    """Base class for scheduling failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class StoreUnavailable(SchedulingError):
    """The availability store could not be read or written."""


class PermissionDenied(SchedulingError):
    """The caller may not change the target provider's schedule."""


class InvalidInput(SchedulingError):
    """A request argument is malformed or out of range."""


class NotFound(SchedulingError):
    """The referenced record does not exist."""
