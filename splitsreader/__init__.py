"""Reader for orienteering split times exported as SI HTML."""

from .errors import DataError, FormatError, SplitsError, WrongFormatError
from .model import AgeClass, Competitor, Course, Event
from .reader import parse_event_data
from .time_utils import NULL_TIME_PLACEHOLDER, format_time, parse_time

__all__ = [
    'AgeClass',
    'Competitor',
    'Course',
    'DataError',
    'Event',
    'FormatError',
    'NULL_TIME_PLACEHOLDER',
    'SplitsError',
    'WrongFormatError',
    'format_time',
    'parse_event_data',
    'parse_time',
]
