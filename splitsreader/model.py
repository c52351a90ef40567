"""
Event model built by the results reader.

An Event owns its Courses and AgeClasses; each AgeClass owns its
Competitors and refers back to the Course it runs on. Objects are built
once by the reader and treated as read-only afterwards.
"""

from typing import Optional

from .time_utils import format_time


class Competitor:
    """A single competitor's run, held as cumulative times from the start."""

    def __init__(
        self,
        order: int,
        name: str,
        club: str,
        start_time: Optional[int],
        cum_times: list,
    ):
        self.order = order
        self.name = name
        self.club = club
        self.start_time = start_time
        self.cum_times = list(cum_times)
        self.split_times = self._split_times_from(self.cum_times)
        self.total_time = self.cum_times[-1] if len(self.cum_times) > 1 else None
        self.is_non_competitive = False

    @classmethod
    def from_cum_times(cls, order, name, club, start_time, cum_times):
        """
        Create a competitor from cumulative times.

        The first cumulative time is the start and should be zero.
        """
        return cls(order, name, club, start_time, cum_times)

    @staticmethod
    def _split_times_from(cum_times: list) -> list:
        splits = []
        for previous, current in zip(cum_times, cum_times[1:]):
            if previous is None or current is None:
                splits.append(None)
            else:
                splits.append(current - previous)
        return splits

    def completed(self) -> bool:
        """Return whether the competitor has a time at every control."""
        return all(time is not None for time in self.cum_times)

    def set_non_competitive(self):
        """Mark this competitor as running outside the competition."""
        self.is_non_competitive = True

    def to_dict(self) -> dict:
        return {
            'order': self.order,
            'name': self.name,
            'club': self.club,
            'start_time': self.start_time,
            'total_time': format_time(self.total_time),
            'non_competitive': self.is_non_competitive,
            'cum_times': self.cum_times,
            'split_times': self.split_times,
        }

    def __repr__(self):
        return f"Competitor({self.order}, {self.name!r}, {self.club!r})"


class AgeClass:
    """A group of competitors running the same course."""

    def __init__(self, name: str, num_controls: int, competitors: list):
        self.name = name
        self.num_controls = num_controls
        self.competitors = competitors
        self.course = None

    def set_course(self, course: 'Course'):
        """Record the course this class runs on."""
        self.course = course

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'num_controls': self.num_controls,
            'course': self.course.name if self.course else None,
            'competitors': [c.to_dict() for c in self.competitors],
        }

    def __repr__(self):
        return f"AgeClass({self.name!r}, {len(self.competitors)} competitors)"


class Course:
    """A course: an ordered list of controls shared by one or more classes."""

    def __init__(
        self,
        name: str,
        classes: list,
        distance: Optional[float],
        climb: Optional[int],
        controls: list,
    ):
        self.name = name
        self.classes = classes
        self.distance = distance
        self.climb = climb
        self.controls = controls

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'distance': self.distance,
            'climb': self.climb,
            'controls': self.controls,
            'classes': [c.name for c in self.classes],
        }

    def __repr__(self):
        return f"Course({self.name!r}, {len(self.controls)} controls)"


class Event:
    """All of the classes and courses read from one results file."""

    def __init__(self, classes: list, courses: list):
        self.classes = classes
        self.courses = courses

    def competitor_count(self) -> int:
        return sum(len(age_class.competitors) for age_class in self.classes)

    def to_dict(self) -> dict:
        return {
            'courses': [course.to_dict() for course in self.courses],
            'classes': [age_class.to_dict() for age_class in self.classes],
        }
