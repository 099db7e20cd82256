"""Reference calendar defining day and month boundaries.

Every analysis that buckets by "day" or "month" takes a
:class:`ReferenceCalendar` so results do not depend on the timezone of the
machine running them. The default calendar is UTC; a grooming salon would
normally pass its own zone, e.g. ``ReferenceCalendar("America/Chicago")``.

Day arithmetic is done on wall-clock time: adding one day to 09:00 on the day
before a DST change yields 09:00 the next day, even though 23 or 25 hours
elapsed.
"""

from __future__ import annotations

import calendar as _stdlib_calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo


@dataclass(frozen=True)
class ReferenceCalendar:
    """Timezone-bound calendar used for all date bucketing.

    Attributes
    ----------
    timezone:
        IANA zone name (e.g. ``"Europe/Berlin"``) or a ``tzinfo`` instance.
    """

    timezone: str | tzinfo = "UTC"

    def __post_init__(self) -> None:
        if isinstance(self.timezone, str):
            object.__setattr__(self, "_tz", ZoneInfo(self.timezone))
        elif isinstance(self.timezone, tzinfo):
            object.__setattr__(self, "_tz", self.timezone)
        else:
            raise TypeError(
                f"timezone must be a zone name or tzinfo, got {type(self.timezone).__name__}"
            )

    @property
    def tz(self) -> tzinfo:
        return self._tz  # type: ignore[attr-defined]

    def localize(self, dt: datetime) -> datetime:
        """Return ``dt`` as an aware datetime in this calendar's zone.

        Naive datetimes are taken as wall-clock time in the calendar's zone;
        aware datetimes are converted.
        """
        if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
            return dt.replace(tzinfo=self.tz)
        return dt.astimezone(self.tz)

    def day_of(self, dt: datetime) -> date:
        return self.localize(dt).date()

    def day_start(self, day: date) -> datetime:
        """Midnight at the start of ``day`` in this calendar's zone."""
        return datetime.combine(day, time.min, tzinfo=self.tz)

    def start_of_day(self, dt: datetime) -> datetime:
        return self.day_start(self.day_of(dt))

    def same_day(self, a: datetime, b: datetime) -> bool:
        return self.day_of(a) == self.day_of(b)

    def add_days(self, dt: datetime, days: int) -> datetime:
        local = self.localize(dt)
        shifted = local.replace(tzinfo=None) + timedelta(days=days)
        return shifted.replace(tzinfo=self.tz)

    def whole_days_between(self, start: datetime, end: datetime) -> int:
        """Whole wall-clock days elapsed from ``start`` to ``end``.

        Partial days are dropped, so 36 hours is 1 day. The result is
        negative when ``end`` precedes ``start``.
        """
        delta = (
            self.localize(end).replace(tzinfo=None)
            - self.localize(start).replace(tzinfo=None)
        )
        if delta >= timedelta(0):
            return delta.days
        return -((-delta).days)

    def start_of_month(self, dt: datetime) -> datetime:
        day = self.day_of(dt)
        return self.day_start(day.replace(day=1))

    def start_of_next_month(self, dt: datetime) -> datetime:
        return self.add_months(self.start_of_month(dt), 1)

    def add_months(self, dt: datetime, months: int) -> datetime:
        """Shift ``dt`` by whole months, clamping the day to the month length."""
        local = self.localize(dt)
        month_index = local.year * 12 + (local.month - 1) + months
        year, month = divmod(month_index, 12)
        month += 1
        last_day = _stdlib_calendar.monthrange(year, month)[1]
        shifted = local.replace(tzinfo=None).replace(
            year=year, month=month, day=min(local.day, last_day)
        )
        return shifted.replace(tzinfo=self.tz)

    def days_in_month(self, dt: datetime) -> int:
        day = self.day_of(dt)
        return _stdlib_calendar.monthrange(day.year, day.month)[1]

    def start_of_year(self, dt: datetime) -> datetime:
        day = self.day_of(dt)
        return self.day_start(date(day.year, 1, 1))

    def days_in_year(self, dt: datetime) -> int:
        return 366 if _stdlib_calendar.isleap(self.day_of(dt).year) else 365


UTC_CALENDAR = ReferenceCalendar("UTC")
