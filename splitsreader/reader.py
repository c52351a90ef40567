"""
Reader for SI HTML results files.

The file is first matched against each registered recognizer. The chosen
recognizer preprocesses the text, then the parser walks the lines once,
building up course and competitor records, and finally assembles them into
an Event.
"""

import logging
from enum import Enum
from typing import Optional

from .errors import DataError, WrongFormatError
from .model import AgeClass, Course, Event
from .records import CompetitorParseRecord, CourseParseRecord
from .recognizers import RECOGNIZERS, BaseRecognizer, CourseLayout

logger = logging.getLogger(__name__)


def normalise_line_endings(text: str) -> str:
    """Convert CRLF and lone CR line endings to LF."""
    return text.replace('\r\n', '\n').replace('\r', '\n')


class LineScanner:
    """Lines of text read one at a time, front to back."""

    def __init__(self, text: str):
        self.lines = text.split('\n')
        self.line_pos = -1

    def try_get_line(self) -> Optional[str]:
        """Return the next unread line, or None at the end of the text."""
        if self.line_pos + 1 < len(self.lines):
            self.line_pos += 1
            return self.lines[self.line_pos]
        return None


class ParserState(Enum):
    SEEKING_FIRST_COURSE = 'seeking_first_course'
    READING_CONTROLS = 'reading_controls'
    READING_COMPETITORS = 'reading_competitors'


class EventAssembler:
    """Builds the final Event from the course records read from a file."""

    def __init__(self, courses: list[CourseParseRecord]):
        self.courses = courses

    def are_age_classes_unique_within_courses(self) -> bool:
        """
        Return whether every class name appears on only one course.

        If so, classes can be used to subdivide courses. If not, each course
        becomes a single class.
        """
        classes_to_courses = {}
        for course in self.courses:
            for competitor in course.competitors:
                course_name = classes_to_courses.setdefault(competitor.class_name, course.name)
                if course_name != course.name:
                    return False
        return True

    def _competitors_have_classes(self) -> bool:
        return all(
            competitor.class_name is not None
            for course in self.courses
            for competitor in course.competitors
        )

    def create_event(self) -> Event:
        # Classes are sometimes repeated across courses. In that case the
        # class names are ignored and each course gets one class.
        use_class_names = self._competitors_have_classes() and self.are_age_classes_unique_within_courses()

        courses = []
        age_classes = []

        for course_record in self.courses:
            class_to_competitors = {}
            for competitor in course_record.competitors:
                class_name = competitor.class_name if use_class_names else course_record.name
                class_to_competitors.setdefault(class_name, []).append(competitor)

            num_controls = len(course_record.controls) - 1
            course_classes = []
            for class_name, records in class_to_competitors.items():
                competitors = [record.to_competitor(index + 1) for index, record in enumerate(records)]
                course_classes.append(AgeClass(class_name, num_controls, competitors))

            course = Course(
                course_record.name,
                course_classes,
                course_record.distance,
                course_record.climb,
                course_record.controls[:-1],
            )
            for age_class in course_classes:
                age_class.set_course(course)

            courses.append(course)
            age_classes.extend(course_classes)

        return Event(age_classes, courses)


class SIHtmlFormatParser:
    """
    Parses SI HTML text with a given recognizer.

    A parser reads one file only; create a new one for each file.
    """

    def __init__(self, recognizer: BaseRecognizer):
        self.recognizer = recognizer
        self.layout = CourseLayout()
        self.state = ParserState.SEEKING_FIRST_COURSE
        self.scanner = None
        self.courses = []
        self.current_course = None
        self.current_competitor = None

    def _add_current_competitor_if_necessary(self):
        if self.current_competitor is not None:
            self.current_course.add_competitor(self.current_competitor)
            self.current_competitor = None

    def _add_current_competitor_and_course_if_necessary(self):
        self._add_current_competitor_if_necessary()
        if self.current_course is not None:
            self.courses.append(self.current_course)
            self.current_course = None

    def read_competitor_lines(self, first_line: str):
        """
        Read one competitor from the given line and the line after it.

        Raises:
            DataError: if there is no line after it, or the record is a
                continuation with nothing to continue
        """
        second_line = self.scanner.try_get_line()
        if second_line is None:
            raise DataError(
                f"Hit end of input data unexpectedly while parsing competitor: first line was '{first_line}'"
            )

        record = self.recognizer.parse_competitor(first_line, second_line, self.layout)
        if record.is_continuation():
            if self.current_competitor is None:
                raise DataError("First row of competitor data has no name nor time")
            self.current_competitor.append(record)
        else:
            self._add_current_competitor_if_necessary()
            self.current_competitor = record

    def _start_course(self, line: str):
        self._add_current_competitor_and_course_if_necessary()
        header = self.recognizer.parse_course_header_line(line)
        logger.debug(f"Reading course '{header.name}'")
        self.current_course = CourseParseRecord(header.name, header.distance, header.climb)

    def handle_line(self, line: str) -> ParserState:
        """Deal with one line of input and return the state to move to."""
        if self.recognizer.can_ignore_line(line, self.layout):
            return self.state

        if self.recognizer.is_course_header_line(line):
            self._start_course(line)
            return ParserState.READING_CONTROLS

        if self.state == ParserState.SEEKING_FIRST_COURSE:
            # Still in the preamble before the first course.
            return self.state

        if self.state == ParserState.READING_CONTROLS:
            self.current_course.add_controls(self.recognizer.parse_controls_line(line))
            if self.current_course.has_all_controls():
                return ParserState.READING_COMPETITORS
            return ParserState.READING_CONTROLS

        self.read_competitor_lines(line)
        return ParserState.READING_COMPETITORS

    def parse(self, text: str) -> Event:
        """
        Parse preprocessed text into an Event.

        Raises:
            DataError: if the data is invalid
        """
        if self.scanner is not None:
            raise ValueError("SIHtmlFormatParser instances can only parse one file")

        self.scanner = LineScanner(text)
        while True:
            line = self.scanner.try_get_line()
            if line is None:
                break
            self.state = self.handle_line(line)

        self._add_current_competitor_and_course_if_necessary()

        return EventAssembler(self.courses).create_event()


def parse_event_data(text: str) -> Event:
    """
    Parse SI HTML results data into an Event.

    Raises:
        WrongFormatError: if no recognizer recognises the data
        DataError: if the data is recognised but invalid
    """
    text = normalise_line_endings(text)
    for name, recognizer_class in RECOGNIZERS.items():
        recognizer = recognizer_class()
        if not recognizer.is_text_of_this_format(text):
            continue

        logger.debug(f"Reading data with the {name} recognizer")
        parser = SIHtmlFormatParser(recognizer)
        event = parser.parse(recognizer.preprocess(text))
        logger.info(
            f"Read {len(event.courses)} courses, {len(event.classes)} classes "
            f"and {event.competitor_count()} competitors"
        )
        return event

    raise WrongFormatError("No HTML recognizers recognised this as HTML they could parse")
