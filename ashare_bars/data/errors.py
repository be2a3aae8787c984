"""
Error types raised by the calendar and bar series layer.
"""


class ParseError(ValueError):
    """A date, date-time or period string could not be parsed."""


class DataIntegrityError(RuntimeError):
    """A multi-session minute window has a gap between sessions that do have data."""
