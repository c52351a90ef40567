"""
Exceptions raised while reading results files.
"""


class SplitsError(Exception):
    """Base class for all errors raised when reading results data."""


class WrongFormatError(SplitsError):
    """
    Raised when the data is not in a format the reader understands.

    Callers can recover from this by trying a different reader.
    """


class DataError(SplitsError):
    """
    Raised when the data is in a recognised format but is invalid.

    The message is intended to be shown to the user as-is.
    """


# Shorter name used by callers that only distinguish format from data errors.
FormatError = WrongFormatError
