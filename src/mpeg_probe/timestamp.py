"""Partial-precision timestamps as stored in ID3v2 tags."""

from __future__ import annotations

import calendar
import datetime
import enum
import re


class TimePart(enum.Flag):
    """A component of a timestamp."""

    NONE = 0
    YEAR = enum.auto()
    MONTH = enum.auto()
    DAY = enum.auto()
    HOUR = enum.auto()
    MINUTE = enum.auto()
    SECOND = enum.auto()


_DATE = TimePart.YEAR | TimePart.MONTH | TimePart.DAY
_ALL = _DATE | TimePart.HOUR | TimePart.MINUTE | TimePart.SECOND

# Most granular first: (part, value key, format, placeholder, separator that
# follows the part when something more granular was rendered).
_RENDER_ORDER = (
    (TimePart.SECOND, "second", "{:02d}", "", ""),
    (TimePart.MINUTE, "minute", "{:02d}", "??", ":"),
    (TimePart.HOUR, "hour", "{:02d}", "??", ":"),
    (TimePart.DAY, "day", "{:02d}", "??", "T"),
    (TimePart.MONTH, "month", "{:02d}", "??", "-"),
    (TimePart.YEAR, "year", "{:04d}", "????", "-"),
)


class Timestamp:
    """A UTC timestamp in which individual components may be unset.

    Components outside ``parts`` hold placeholder values (January 1st of
    year 1, midnight) and are reported as -1 by the accessors.
    """

    __slots__ = ("_values", "_parts")

    def __init__(
        self,
        year: int = 1,
        month: int = 1,
        day: int = 1,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        parts: TimePart = TimePart.NONE,
    ):
        values = {
            "year": year if parts & TimePart.YEAR else 1,
            "month": month if parts & TimePart.MONTH else 1,
            "day": day if parts & TimePart.DAY else 1,
            "hour": hour if parts & TimePart.HOUR else 0,
            "minute": minute if parts & TimePart.MINUTE else 0,
            "second": second if parts & TimePart.SECOND else 0,
        }
        object.__setattr__(self, "_values", values)
        object.__setattr__(self, "_parts", parts)

    def __setattr__(self, name, value):
        raise AttributeError("Timestamp is immutable")

    @property
    def parts(self) -> TimePart:
        return self._parts

    @property
    def empty(self) -> bool:
        """True if none of the components are set."""
        return self._parts == TimePart.NONE

    def _get(self, part: TimePart, name: str) -> int:
        if self._parts & part:
            return self._values[name]
        return -1

    @property
    def year(self) -> int:
        return self._get(TimePart.YEAR, "year")

    @property
    def month(self) -> int:
        return self._get(TimePart.MONTH, "month")

    @property
    def day(self) -> int:
        return self._get(TimePart.DAY, "day")

    @property
    def hour(self) -> int:
        return self._get(TimePart.HOUR, "hour")

    @property
    def minute(self) -> int:
        return self._get(TimePart.MINUTE, "minute")

    @property
    def second(self) -> int:
        return self._get(TimePart.SECOND, "second")

    @property
    def datetime(self) -> datetime.datetime:
        """The underlying UTC instant.

        Unset components carry placeholder values. A split-field date like
        31 February is clamped to the last day of the month here.
        """
        v = self._values
        last_day = calendar.monthrange(v["year"], v["month"])[1]
        return datetime.datetime(
            v["year"], v["month"], min(v["day"], last_day),
            v["hour"], v["minute"], v["second"],
            tzinfo=datetime.timezone.utc,
        )

    def __str__(self) -> str:
        out = ""
        for part, name, fmt, unknown, sep in _RENDER_ORDER:
            if self._parts & part:
                text = fmt.format(self._values[name])
            elif out:
                text = unknown
            else:
                continue
            out = text + sep + out if out else text
        return out

    def __repr__(self) -> str:
        return "Timestamp({!r})".format(str(self))

    def __eq__(self, other):
        if not isinstance(other, Timestamp):
            return NotImplemented
        return self._parts == other._parts and self._values == other._values

    def __hash__(self):
        return hash((self._parts, tuple(self._values.values())))


# ID3v2.4 timestamps are a subset of ISO 8601 in which precision may be
# reduced by dropping trailing components: yyyy, yyyy-MM, yyyy-MM-dd,
# yyyy-MM-ddTHH, yyyy-MM-ddTHH:mm and yyyy-MM-ddTHH:mm:ss, all UTC.
_V24_LADDER = (
    (re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})T([0-9]{2}):([0-9]{2}):([0-9]{2})"), _ALL),
    (re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})T([0-9]{2}):([0-9]{2})"), _DATE | TimePart.HOUR | TimePart.MINUTE),
    (re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})T([0-9]{2})"), _DATE | TimePart.HOUR),
    (re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})"), _DATE),
    (re.compile(r"([0-9]{4})-([0-9]{2})"), TimePart.YEAR | TimePart.MONTH),
    (re.compile(r"([0-9]{4})"), TimePart.YEAR),
)


def parse_id3v24_time(value: str) -> Timestamp:
    """Parse an ID3v2.4 variable-precision timestamp like "2021-04-10T15:06".

    Returns an empty Timestamp if the string doesn't exactly match one of the
    supported precisions or names an impossible date.
    """
    for pattern, parts in _V24_LADDER:
        m = pattern.fullmatch(value)
        if not m:
            continue
        fields = [int(g) for g in m.groups()]
        try:
            # Rejects out-of-range components such as month 13 or 30 February.
            datetime.datetime(*(fields + [1] * (3 - len(fields))))
        except ValueError:
            return Timestamp()
        return Timestamp(*fields, parts=parts)
    return Timestamp()


def _split_field(value: str) -> tuple[int, int] | None:
    """Split a 4-digit field into two 2-digit integers."""
    if not re.fullmatch(r"[0-9]{4}", value):
        return None
    return int(value[:2]), int(value[2:])


def parse_id3v23_time(year_str: str, date_str: str, time_str: str) -> Timestamp:
    """Parse an ID3v2.3 timestamp split across TYER, TDAT and TIME values.

    TYER is "YYYY", TDAT is "MMDD" and TIME is "HHMM". Each field is checked
    on its own and invalid or empty ones are left out of the result.
    """
    parts = TimePart.NONE
    year, month, day, hour, minute = 1, 1, 1, 0, 0

    if re.fullmatch(r"[0-9]{4}", year_str) and int(year_str) > 0:
        year = int(year_str)
        parts |= TimePart.YEAR

    # No per-month day count check.
    date = _split_field(date_str)
    if date and 1 <= date[0] <= 12 and 1 <= date[1] <= 31:
        month, day = date
        parts |= TimePart.MONTH | TimePart.DAY

    tm = _split_field(time_str)
    if tm and 0 <= tm[0] <= 23 and 0 <= tm[1] <= 59:
        hour, minute = tm
        parts |= TimePart.HOUR | TimePart.MINUTE

    return Timestamp(year, month, day, hour, minute, parts=parts)


class TimeType(enum.Enum):
    """Which timestamp to read from an ID3v2 tag."""

    RECORDING_TIME = "recording"
    ORIGINAL_RELEASE_TIME = "original_release"
    RELEASE_TIME = "release"
