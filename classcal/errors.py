"""Error types raised by the schedule store and its transports."""


class ScheduleError(Exception):
    """Base class for schedule store failures."""


class TransportError(ScheduleError):
    """The backing record store could not be reached or rejected a call."""


class FetchError(ScheduleError):
    """Reading or subscribing to the class collection failed."""


class WriteError(ScheduleError):
    """Creating, updating or deleting a class failed."""
