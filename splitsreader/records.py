"""
Intermediate records built up while reading a results file.

These hold the raw data for one course and its competitors until the
whole file has been read and the final event model can be built.
"""

import logging
from typing import Optional

from .errors import DataError
from .model import Competitor
from .time_utils import format_time

logger = logging.getLogger(__name__)


class CompetitorParseRecord:
    """
    Raw data for one competitor, possibly read across several pairs of lines.

    A record with no name, club, class name or total time, and which is not
    competitive, is a 'continuation' record: it only carries more cumulative
    times for the competitor read before it.
    """

    def __init__(
        self,
        name: str,
        club: str,
        class_name: Optional[str],
        total_time: str,
        cum_times: list,
        competitive: bool,
    ):
        self.name = name
        self.club = club
        self.class_name = class_name
        self.total_time = total_time
        self.cum_times = cum_times
        self.competitive = competitive

    def is_continuation(self) -> bool:
        return (
            self.name == ""
            and self.club == ""
            and self.class_name is None
            and self.total_time == ""
            and not self.competitive
        )

    def append(self, other: 'CompetitorParseRecord'):
        """Append the cumulative times of a continuation record to this one."""
        if not other.is_continuation():
            raise ValueError("Can only append a continuation CompetitorParseRecord")
        self.cum_times = self.cum_times + other.cum_times

    def to_competitor(self, order: int) -> Competitor:
        """
        Create the final Competitor from this record.

        Args:
            order: Position of the competitor within their class (1-based)

        Raises:
            DataError: if the cumulative times are not strictly ascending
        """
        last_cum_time = 0
        for cum_time in self.cum_times:
            if cum_time is None:
                continue
            if cum_time <= last_cum_time:
                raise DataError(
                    "Cumulative times must be strictly ascending: read "
                    f"{format_time(last_cum_time)} and {format_time(cum_time)} in that order"
                )
            last_cum_time = cum_time

        # Zero for the start; the start time itself is not in these files.
        competitor = Competitor.from_cum_times(order, self.name, self.club, None, [0] + self.cum_times)
        if competitor.completed() and not self.competitive:
            competitor.set_non_competitive()

        return competitor


class CourseParseRecord:
    """Raw data for one course: its controls and its competitors."""

    def __init__(self, name: str, distance: Optional[float] = None, climb: Optional[int] = None):
        self.name = name
        self.distance = distance
        self.climb = climb
        self.controls = []
        self.competitors = []

    def add_controls(self, controls: list):
        self.controls = self.controls + controls

    def has_all_controls(self) -> bool:
        """Return whether the finish (a None control code) has been read."""
        return len(self.controls) > 0 and self.controls[-1] is None

    def add_competitor(self, competitor: CompetitorParseRecord):
        """
        Add a competitor, checking they have a time for every control.

        Mispunchers sometimes have no finish time at all, not even a
        placeholder. Only non-competitive records get the missing finish
        filled in; a competitive record that is short is an error.
        """
        if not competitor.competitive and len(competitor.cum_times) == len(self.controls) - 1:
            logger.debug(f"Adding missing finish time for '{competitor.name}'")
            competitor.cum_times.append(None)

        if len(competitor.cum_times) != len(self.controls):
            raise DataError(
                f"Competitor '{competitor.name}' should have {len(self.controls)} "
                f"cumulative times, but has {len(competitor.cum_times)} times"
            )

        self.competitors.append(competitor)
