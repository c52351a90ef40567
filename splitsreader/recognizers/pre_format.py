"""
Recognizer for the older SI HTML format, based on preformatted text.

All of the results sit inside a single <pre> element. Course headers,
names, clubs and total times are wrapped in <font> elements; control codes
and times are plain whitespace-separated text.
"""

import re

from ..errors import DataError
from ..records import CompetitorParseRecord
from ..time_utils import parse_time
from .base_recognizer import (
    BaseRecognizer,
    CourseHeader,
    CourseLayout,
    cell,
    check_time_counts,
    has_number,
    read_control_codes,
    remove_extra_controls,
    split_by_whitespace,
    strip_html,
    try_read_climb,
    try_read_distance,
)

FONT_REGEXP = re.compile(r'<font[^>]*>(.*?)</font>')
CLOSE_FONT = '</font>'

# Position, start number, name and total time each sit in a <font>
# element at the start of a competitor line; the times follow.
COMPETITOR_FONT_COUNT = 4


def get_font_bits(text: str) -> list[str]:
    """Return the contents of all <font> elements, stripped of other tags."""
    return [strip_html(match) for match in FONT_REGEXP.findall(text)]


class PreFormatRecognizer(BaseRecognizer):
    """Recognizer for preformatted-text SI HTML files."""

    name = 'pre_format'

    def is_text_of_this_format(self, text: str) -> bool:
        return '<pre>' in text

    def preprocess(self, text: str) -> str:
        """Strip everything outside the <pre> ... </pre> element."""
        pre_pos = text.find('<pre>')
        if pre_pos == -1:
            raise DataError("Cannot find opening <pre> tag")

        # Skip the rest of the line holding the opening tag.
        line_end_pos = text.find('\n', pre_pos)
        text = text[line_end_pos + 1:]

        close_pre_pos = text.rfind('</pre>')
        if close_pre_pos == -1:
            raise DataError("Found opening <pre> but no closing </pre>")

        line_end_pos = text.rfind('\n', 0, close_pre_pos)
        text = text[:line_end_pos] if line_end_pos > -1 else ''
        return text.strip()

    def can_ignore_line(self, line: str, layout: CourseLayout) -> bool:
        return line == ""

    def is_course_header_line(self, line: str) -> bool:
        """A course header line has exactly two <font> elements."""
        return len(get_font_bits(line)) == 2

    def parse_course_header_line(self, line: str) -> CourseHeader:
        bits = get_font_bits(line)
        if len(bits) != 2:
            raise DataError(f"Course header line should have two parts: '{line}'")

        name_and_controls, distance_and_climb = bits
        name = name_and_controls.split('(', 1)[0].strip()

        return CourseHeader(
            name=name,
            distance=try_read_distance(distance_and_climb),
            climb=try_read_climb(distance_and_climb),
        )

    def parse_controls_line(self, line: str) -> list:
        last_font_pos = line.rfind(CLOSE_FONT)
        if last_font_pos > -1:
            line = line[last_font_pos + len(CLOSE_FONT):]

        return read_control_codes(split_by_whitespace(line.strip()))

    def _split_at_times(self, line: str) -> tuple[str, str]:
        """Split a competitor line into the part holding the <font> fields and the times."""
        parts = line.split(CLOSE_FONT, COMPETITOR_FONT_COUNT)
        if len(parts) <= COMPETITOR_FONT_COUNT:
            return line, ''
        fields = CLOSE_FONT.join(parts[:COMPETITOR_FONT_COUNT]) + CLOSE_FONT
        return fields, parts[COMPETITOR_FONT_COUNT]

    def read_competitor_split_data_line(self, line: str) -> list[str]:
        """Read either cumulative or split times from a line of competitor data."""
        _, times = self._split_at_times(line)
        return split_by_whitespace(strip_html(times))

    def _read_class_name(self, first_line: str):
        """The class name is the first bit of plain text among the <font> fields."""
        fields, _ = self._split_at_times(first_line)
        line_parts = split_by_whitespace(FONT_REGEXP.sub('', fields))
        return line_parts[0] if line_parts else None

    def parse_competitor(self, first_line: str, second_line: str, layout: CourseLayout) -> CompetitorParseRecord:
        first_line_bits = get_font_bits(first_line)
        second_line_bits = get_font_bits(second_line)

        competitive = has_number(cell(first_line_bits, 0))
        name = cell(first_line_bits, 2)
        total_time = cell(first_line_bits, 3)
        club = cell(second_line_bits, 2)

        cum_times = [parse_time(time) for time in self.read_competitor_split_data_line(first_line)]
        split_times = self.read_competitor_split_data_line(second_line)
        check_time_counts(cum_times, split_times)

        class_name = self._read_class_name(first_line) if name else None

        remove_extra_controls(cum_times, split_times)

        return CompetitorParseRecord(name, club, class_name, total_time, cum_times, competitive)
