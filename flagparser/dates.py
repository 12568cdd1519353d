"""
Flagparser dates: relative shorthand resolution against a reference instant.

Shorthand grammar
- a value is a run of segments "<signed integer><marker>" where the marker is
  one of "y" (years), "m" (months) or "d" (days): "2d", "-2m", "1y2m3d",
  "-4d-1m-3y". spaces and letter case are ignored ("-4 D" == "-4d").
- a value with no marker at all is a literal date and passes through unchanged.
- a later segment for the same marker overwrites an earlier one.
- "start:end" joins two operands into a range; each side resolves on its own.

Calendar
- deltas are applied with dateutil's relativedelta: years and months first
  (clamped to the last day of the target month), then days. results are
  rendered as YYYY-MM-DD whatever the clock's parsing layout is.

Quick example
    >>> clock = with_now_as("2022-03-14", "%Y-%m-%d")
    >>> resolve("1y1m2d", clock)
    '2023-04-16'
    >>> resolve_range("-2m:-1m", clock)
    '2022-01-14:2022-02-14'
"""
import re
from datetime import date, datetime, timedelta
from typing import NamedTuple

from dateutil.relativedelta import relativedelta

from .faults import UnknownDateInputError, MalformedDateRangeError
from .logs import getLogger

logger = getLogger(__name__)

MARKERS = ("y", "m", "d")
SEPARATOR = ":"
FORMAT = "%Y-%m-%d"


class Clock(NamedTuple):
    """
    reference instant used for relative date math, plus the layout literal
    dates are expected to follow.
    """
    now: date
    layout: str = FORMAT


class DateDelta(NamedTuple):
    """signed calendar offset accumulated from a shorthand expression."""
    years: int = 0
    months: int = 0
    days: int = 0

    def apply(self, moment, /):
        """
        shift `moment` by the delta.

        years and months move the first of the month; the day of month and the
        day offset are added afterwards, so overflow rolls into the following
        month (2022-01-31 + 1m -> 2022-03-03).
        """
        first = moment.replace(day=1) + relativedelta(years=self.years, months=self.months)
        return first + timedelta(days=moment.day - 1 + self.days)


def with_now_as(now, layout=FORMAT, /):
    """
    build a Clock pinned to a given moment.

    parameters
    - now: date | datetime | str; strings are parsed with `layout`.
    - layout: strftime/strptime layout of literal dates (default "%Y-%m-%d").

    errors
    - ValueError when a string moment does not follow the layout.
    - TypeError for any other kind of moment.
    """
    if not isinstance(layout, str) or not layout:
        raise TypeError("with_now_as() layout must be a non-empty string")
    if isinstance(now, str):
        now = datetime.strptime(now, layout)
    if isinstance(now, datetime):
        now = now.date()
    if not isinstance(now, date):
        raise TypeError("with_now_as() moment must be a date, a datetime or a string")
    return Clock(now, layout)


def system_clock(layout=FORMAT, /):
    """build a Clock pinned to today's local date."""
    return with_now_as(date.today(), layout)


def format(moment, /):
    return "%04d-%02d-%02d" % (moment.year, moment.month, moment.day)


def normalize(value, /):
    """lowercase a raw value and drop every space."""
    return value.replace(" ", "").lower()


def isshorthand(value, /):
    """true when a normalized value carries at least one y/m/d marker."""
    return any(marker in value for marker in MARKERS)


def delta(value, /):
    """
    parse a normalized shorthand value into a DateDelta.

    each marker closes a segment whose text (since the previous marker or the
    start) must be an optionally signed integer, otherwise UnknownDateInputError
    is raised. text left after the last marker is ignored.
    """
    slots = dict.fromkeys(MARKERS, 0)
    start = 0
    for index, char in enumerate(value):
        if char not in slots:
            continue
        prefix = value[start:index]
        if not re.fullmatch(r"[+-]?\d+", prefix):
            raise UnknownDateInputError(
                "unknown elements %r before %r in date argument %r" % (prefix, char, value),
                hint="write relative dates as <number><y|m|d>, e.g. -2m or 1y2m3d",
                token=value,
            )
        slots[char] = int(prefix)
        start = index + 1

    if value[start:]:
        logger.debug("ignoring %r after the last marker in %r", value[start:], value)
    return DateDelta(slots["y"], slots["m"], slots["d"])


def resolve(value, clock, /):
    """
    resolve one operand.

    literal dates (no marker) are returned untouched; shorthand is applied to
    the clock's moment and rendered as YYYY-MM-DD.
    """
    normalized = normalize(value)
    if not isshorthand(normalized):
        return value
    offset = delta(normalized)
    resolved = format(offset.apply(clock.now))
    logger.debug("resolved %r as %r relative to %s", value, resolved, format(clock.now))
    return resolved


def isrange(value, /):
    return SEPARATOR in value


def resolve_range(value, clock, /):
    """
    resolve a "start:end" range, operand by operand.

    errors
    - MalformedDateRangeError on a missing operand, more than one separator, or
      an operand that is neither shorthand nor a literal date in the clock's layout.
    - UnknownDateInputError on a malformed shorthand segment (e.g. "-1y:d").
    """
    operands = normalize(value).split(SEPARATOR)
    if len(operands) != 2 or not all(operands):
        raise MalformedDateRangeError(
            "date range %r needs exactly two operands" % value,
            hint="write ranges as <start>:<end>, e.g. -2m:-1m",
            token=value,
        )

    resolved = []
    for operand in operands:
        if isshorthand(operand):
            resolved.append(resolve(operand, clock))
            continue
        try:
            datetime.strptime(operand, clock.layout)
        except ValueError:
            raise MalformedDateRangeError(
                "operand %r of date range %r has no time unit" % (operand, value),
                hint="add a y, m or d marker (e.g. %sd) or use a literal date" % operand,
                token=value,
            ) from None
        resolved.append(operand)

    return SEPARATOR.join(resolved)


__all__ = (
    "Clock",
    "DateDelta",
    "with_now_as",
    "system_clock",
    "resolve",
    "resolve_range",
)
