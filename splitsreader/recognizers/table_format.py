"""
Recognizer for the newer SI HTML format, based on HTML tables.

Each course takes three tables: one for the course header, one for the
column headers and controls, and one for the competitors. Two further
tables come before the first course.
"""

import re
from bs4 import BeautifulSoup

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
    is_non_empty,
    read_control_codes,
    remove_extra_controls,
    try_read_climb,
    try_read_distance,
)

MIN_TABLE_COUNT = 5

# Column headers are position, start number, name, class and time when the
# class column is present, and one fewer without it.
HEADER_CELLS_WITH_CLASS = 5

# Rows holding only a non-breaking space. Some files leave the semicolon
# off the entity.
BLANK_ROW_REGEXP = re.compile(r'<tr[^>]*><td[^>]*>(?:<nobr>)?&nbsp;?(?:</nobr>)?</td></tr>')
CLOSE_COL_REGEXP = re.compile(r'</col[^>]*>')


def _cell_texts(text: str, tag: str) -> list[str]:
    soup = BeautifulSoup(text, 'html.parser')
    return [element.get_text().strip() for element in soup.find_all(tag)]


def get_table_data_bits(text: str) -> list[str]:
    """Return the stripped text of every <td> cell in the text."""
    return _cell_texts(text, 'td')


def get_non_empty_table_data_bits(text: str) -> list[str]:
    return [bit for bit in get_table_data_bits(text) if bit]


def get_non_empty_table_header_bits(text: str) -> list[str]:
    return [bit for bit in _cell_texts(text, 'th') if bit]


class TableFormatRecognizer(BaseRecognizer):
    """Recognizer for table-based SI HTML files."""

    name = 'table_format'

    def is_text_of_this_format(self, text: str) -> bool:
        """The file should have at least five tables: three per course, plus two."""
        return text.count('<table') >= MIN_TABLE_COUNT

    def preprocess(self, text: str) -> str:
        """
        Remove the parts of the file we don't need and put each table row
        on a line of its own.
        """
        # Remove the first table, and the end of the <div> it sits in.
        table_end_pos = text.find('</table>')
        if table_end_pos == -1:
            raise DataError("Could not find any closing </table> tags")

        text = text[table_end_pos + len('</table>'):]

        close_div_pos = text.find('</div>')
        open_table_pos = text.find('<table')
        if close_div_pos > -1 and close_div_pos < open_table_pos:
            text = text[close_div_pos + len('</div>'):]

        # Table and row tags start lines, closing table and row tags end them.
        text = (
            text.replace('>\n<', '><')
            .replace('><tr>', '>\n<tr>')
            .replace('</tr><', '</tr>\n<')
            .replace('><table', '>\n<table')
            .replace('</table><', '</table>\n<')
        )

        text = CLOSE_COL_REGEXP.sub('', text)
        text = BLANK_ROW_REGEXP.sub('', text)
        text = text.replace('</body></html>', '')

        return text.strip()

    def can_ignore_line(self, line: str, layout: CourseLayout) -> bool:
        """
        Ignore blank lines and table tags.

        A row of column headers is also ignored, but first it is used to set
        whether the current course has a class column.
        """
        if '<th>' in line:
            bits = get_non_empty_table_header_bits(line)
            layout.has_class_column = len(bits) == HEADER_CELLS_WITH_CLASS
            return True

        return line == "" or '<table' in line or '</table>' in line

    def is_course_header_line(self, line: str) -> bool:
        return '<td id="header"' in line

    def parse_course_header_line(self, line: str) -> CourseHeader:
        data_bits = get_non_empty_table_data_bits(line)
        if not data_bits:
            raise DataError("No parts found in course header line")

        name = data_bits[0].split('(', 1)[0].strip()

        distance = None
        climb = None
        for bit in data_bits[1:]:
            if distance is None:
                distance = try_read_distance(bit)
            if climb is None:
                climb = try_read_climb(bit)

        return CourseHeader(name=name, distance=distance, climb=climb)

    def parse_controls_line(self, line: str) -> list:
        return read_control_codes(get_non_empty_table_data_bits(line))

    def read_competitor_split_data_line(self, line: str, layout: CourseLayout) -> list[str]:
        """Read either cumulative or split times from a row of competitor data."""
        bits = get_table_data_bits(line)
        start_pos = 5 if layout.has_class_column else 4

        # Discard the empty cells at the end.
        end_pos = len(bits)
        while end_pos > 0 and bits[end_pos - 1] == "":
            end_pos -= 1

        return [bit for bit in bits[start_pos:end_pos] if is_non_empty(bit)]

    def parse_competitor(self, first_line: str, second_line: str, layout: CourseLayout) -> CompetitorParseRecord:
        first_line_bits = get_table_data_bits(first_line)
        second_line_bits = get_table_data_bits(second_line)

        competitive = has_number(cell(first_line_bits, 0))
        name = cell(first_line_bits, 2)
        total_time = cell(first_line_bits, 4 if layout.has_class_column else 3)
        club = cell(second_line_bits, 2)

        class_name = None
        if layout.has_class_column and name != "":
            class_name = cell(first_line_bits, 3)

        cum_times = [parse_time(time) for time in self.read_competitor_split_data_line(first_line, layout)]
        split_times = self.read_competitor_split_data_line(second_line, layout)
        check_time_counts(cum_times, split_times)

        remove_extra_controls(cum_times, split_times)

        return CompetitorParseRecord(name, club, class_name, total_time, cum_times, competitive)
