"""
Base recognizer class for reading SI HTML results files.
All recognizers must inherit from this class and implement every method.

A recognizer deals with the details of one HTML dialect. The reader drives
the line-by-line parse and asks the recognizer what each line means.
"""

from abc import ABC, abstractmethod
from typing import Optional
import re

from ..errors import DataError

HTML_TAG_STRIP_REGEXP = re.compile(r'<[^>]+>')
DISTANCE_FIND_REGEXP = re.compile(r'([0-9.]+)\s*(?:Km|km)')
CLIMB_FIND_REGEXP = re.compile(r'(\d+)\s*(?:Cm|Hm|hm|m)')
NUMBER_REGEXP = re.compile(r'^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$')


class CourseHeader:
    """Name, distance (km) and climb (m) read from a course header line."""

    def __init__(self, name: str, distance: Optional[float] = None, climb: Optional[int] = None):
        self.name = name
        self.distance = distance
        self.climb = climb

    def __repr__(self):
        return f"CourseHeader({self.name!r}, {self.distance!r}, {self.climb!r})"


class CourseLayout:
    """
    Column layout of the course currently being read.

    Owned by the reader for the duration of one parse and passed to the
    recognizer, which updates it when it sees a column-header row.
    """

    def __init__(self, has_class_column: bool = False):
        self.has_class_column = has_class_column


class BaseRecognizer(ABC):
    """Abstract base class for SI HTML dialect recognizers."""

    name = ""

    @abstractmethod
    def is_text_of_this_format(self, text: str) -> bool:
        """
        Return whether the text looks like this dialect.

        This is a cheap check and must not raise. If it returns True the
        reader commits to this recognizer.
        """
        pass

    @abstractmethod
    def preprocess(self, text: str) -> str:
        """
        Trim and reshape the text before it is split into lines.

        Raises:
            DataError: if the text is missing tags this dialect needs
        """
        pass

    @abstractmethod
    def can_ignore_line(self, line: str, layout: CourseLayout) -> bool:
        """Return whether the reader can skip this line altogether."""
        pass

    @abstractmethod
    def is_course_header_line(self, line: str) -> bool:
        """Return whether this line starts a new course."""
        pass

    @abstractmethod
    def parse_course_header_line(self, line: str) -> CourseHeader:
        pass

    @abstractmethod
    def parse_controls_line(self, line: str) -> list:
        """
        Read control codes from a line.

        Returns:
            List of control codes, with None for the finish
        """
        pass

    @abstractmethod
    def parse_competitor(self, first_line: str, second_line: str, layout: CourseLayout):
        """
        Read one competitor from a pair of lines.

        Args:
            first_line: Line holding the name, total time and cumulative times
            second_line: Line holding the club and split times
            layout: Column layout of the current course

        Returns:
            A CompetitorParseRecord
        """
        pass


def is_non_empty(text: Optional[str]) -> bool:
    return text is not None and text != ""


def has_number(text: Optional[str]) -> bool:
    """Return whether the text, once stripped, is a plain decimal number."""
    if text is None:
        return False
    return NUMBER_REGEXP.match(text.strip()) is not None


def cell(bits: list[str], index: int) -> str:
    """Return the stripped field at the index, or an empty string past the end."""
    return bits[index].strip() if index < len(bits) else ""


def split_by_whitespace(line: str) -> list[str]:
    return [bit for bit in re.split(r'\s+', line) if bit]


def strip_html(text: str) -> str:
    return HTML_TAG_STRIP_REGEXP.sub('', text)


def try_read_distance(text: str) -> Optional[float]:
    """Read a course distance in kilometres, e.g. '4.1 km'."""
    match = DISTANCE_FIND_REGEXP.search(text)
    if not match:
        return None
    try:
        return float(match.group(1))
    except ValueError:
        return None


def try_read_climb(text: str) -> Optional[int]:
    """Read a course climb in metres, e.g. '140 m' or '140 Hm'."""
    match = CLIMB_FIND_REGEXP.search(text)
    if not match:
        return None
    return int(match.group(1))


def read_control_codes(labels: list[str]) -> list:
    """
    Read control codes from labels of the form num(code).

    The finish has no parentheses and must be the last label; it is
    returned as None.

    Raises:
        DataError: for any other label without parentheses
    """
    control_codes = []
    for index, label in enumerate(labels):
        paren_pos = label.find('(')
        if paren_pos > -1 and label.endswith(')'):
            control_codes.append(label[paren_pos + 1:-1])
        elif index + 1 == len(labels):
            control_codes.append(None)
        else:
            raise DataError(f"Unrecognised control header label: '{label}'")

    return control_codes


def remove_extra_controls(cum_times: list, split_times: list):
    """
    Remove trailing 'extra' controls from the two lists, in place.

    An extra control is one the competitor punched that is not on their
    course. Its split 'time' starts with an asterisk.
    """
    while split_times and split_times[-1].startswith('*'):
        split_times.pop()
        cum_times.pop()


def check_time_counts(cum_times: list, split_times: list):
    """
    Check there is a split time for every recorded cumulative time.

    Raises:
        DataError: if the counts differ
    """
    non_null_count = sum(1 for time in cum_times if time is not None)
    if non_null_count != len(split_times):
        raise DataError(
            "Cumulative and split times do not have the same length: "
            f"{non_null_count} cumulative times, {len(split_times)} split times"
        )
