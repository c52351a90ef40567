"""
Formatting and parsing of race times.

Times are held as whole numbers of seconds. A missing time is None and is
shown as NULL_TIME_PLACEHOLDER.
"""

import re
from typing import Optional

NULL_TIME_PLACEHOLDER = '-----'

TIME_REGEXP = re.compile(r'^(-?)(\d+):(\d\d)(?::(\d\d))?$')


def format_time(seconds: Optional[int]) -> str:
    """
    Format a number of seconds as a time string.

    Times under an hour come out as MM:SS, longer ones as H:MM:SS.
    Negative times get a leading minus sign.
    """
    if seconds is None:
        return NULL_TIME_PLACEHOLDER

    sign = ''
    if seconds < 0:
        sign = '-'
        seconds = -seconds

    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)

    if hours > 0:
        return f"{sign}{hours}:{minutes:02d}:{secs:02d}"
    return f"{sign}{minutes:02d}:{secs:02d}"


def parse_time(time_str: str) -> Optional[int]:
    """
    Parse a time string into a number of seconds.

    Handles formats like:
    - "12:34" (minutes:seconds, any number of minutes)
    - "1:02:34" (hours:minutes:seconds)
    - "-00:15" (negative times)

    Returns None for the placeholder or anything that is not a time.
    """
    if time_str is None:
        return None

    time_str = time_str.strip()
    if time_str == NULL_TIME_PLACEHOLDER:
        return None

    match = TIME_REGEXP.match(time_str)
    if not match:
        return None

    sign, first, second, third = match.groups()
    if third is None:
        # Minutes:seconds
        total = int(first) * 60 + int(second)
    else:
        # Hours:minutes:seconds
        total = int(first) * 3600 + int(second) * 60 + int(third)

    return -total if sign else total
