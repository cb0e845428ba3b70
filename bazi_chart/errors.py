"""
Error types raised by the chart engine.

Pure-computation errors are deterministic: retrying the same input
gives the same failure. Only CalendarLibraryUnavailable is recoverable,
by switching to the arithmetic calendar.
"""


class BaziError(Exception):
    """Base class for all chart engine errors."""


class InvalidDateFormat(BaziError, ValueError):
    """Timestamp string could not be parsed as a local wall-clock time."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"INVALID_DATE_FORMAT: {value!r} (expected YYYY-MM-DDTHH:MM[:SS])")


class MissingTimezone(BaziError):
    """Solar correction was requested without a resolvable IANA timezone."""

    def __init__(self, timezone_id=None):
        self.timezone_id = timezone_id
        if timezone_id:
            message = f"Unknown timezone {timezone_id!r}; use the fallback solar time path"
        else:
            message = "Timezone is required for True Solar Time calculation"
        super().__init__(message)


class MissingCoordinates(BaziError):
    """Solar correction was requested without a longitude."""

    def __init__(self):
        super().__init__("Coordinates are required for True Solar Time calculation")


class UnknownStemOrBranch(BaziError, LookupError):
    """A fixed table lookup missed. This is a programming defect, never user input."""


class CalendarLibraryUnavailable(BaziError):
    """The precise calendar authority could not produce a reading."""


class GeoResolutionFailed(BaziError):
    """A Geo Resolver could not place the birth location."""
