"""Customer retention classification.

Tags every owner with exactly one retention category based on how long ago
their last appointment was and how many appointments they have had:

- Is this a brand-new client we should welcome?
- Is the client visiting regularly?
- Has the client gone quiet long enough that we risk losing them?
- Have we effectively lost them already?

Classification is a pure function of ``(last_appointment_date,
appointment_count, now)``. The evaluation instant is always passed in
explicitly so results are reproducible.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from furfolio_analytics.exceptions import InvalidInputError
from furfolio_analytics.foundation.calendar import UTC_CALENDAR, ReferenceCalendar
from furfolio_analytics.foundation.records import Owner

# Default day thresholds used by the grooming dashboard
DEFAULT_NEW_CLIENT_WINDOW_DAYS = 14
DEFAULT_ACTIVE_WINDOW_DAYS = 30
DEFAULT_RETENTION_RISK_WINDOW_DAYS = 60
DEFAULT_INACTIVE_WINDOW_DAYS = 180


class RetentionCategory(str, Enum):
    """Mutually exclusive retention buckets, in precedence order."""

    NEW_CLIENT = "new_client"
    ACTIVE = "active"
    RETURNING = "returning"
    RETENTION_RISK = "retention_risk"
    INACTIVE = "inactive"


@dataclass(frozen=True)
class RetentionConfig:
    """Day thresholds for retention classification.

    Attributes
    ----------
    new_client_window_days:
        Owners with at most one appointment, seen within this many days,
        are new clients
    active_window_days:
        Owners seen within this many days are active
    retention_risk_window_days:
        Owners not seen for more than this many days are at risk
    inactive_window_days:
        Owners not seen for more than this many days are inactive
    """

    new_client_window_days: int = DEFAULT_NEW_CLIENT_WINDOW_DAYS
    active_window_days: int = DEFAULT_ACTIVE_WINDOW_DAYS
    retention_risk_window_days: int = DEFAULT_RETENTION_RISK_WINDOW_DAYS
    inactive_window_days: int = DEFAULT_INACTIVE_WINDOW_DAYS

    def __post_init__(self) -> None:
        """Validate window ordering."""
        windows = (
            ("new_client_window_days", self.new_client_window_days),
            ("active_window_days", self.active_window_days),
            ("retention_risk_window_days", self.retention_risk_window_days),
            ("inactive_window_days", self.inactive_window_days),
        )
        for name, value in windows:
            if value <= 0:
                raise InvalidInputError(f"{name} must be positive: {value}")
        if not (
            self.new_client_window_days
            <= self.active_window_days
            <= self.retention_risk_window_days
            <= self.inactive_window_days
        ):
            raise InvalidInputError(
                "Retention windows must be non-decreasing: "
                f"new_client={self.new_client_window_days}, "
                f"active={self.active_window_days}, "
                f"retention_risk={self.retention_risk_window_days}, "
                f"inactive={self.inactive_window_days}"
            )


class RetentionClassifier:
    """Classify owners into retention categories."""

    def __init__(
        self,
        config: Optional[RetentionConfig] = None,
        calendar: Optional[ReferenceCalendar] = None,
    ) -> None:
        self.config = config or RetentionConfig()
        self.calendar = calendar or UTC_CALENDAR

    def days_since(self, last_appointment_date: datetime, now: datetime) -> int:
        """Whole days from the last appointment to ``now``, never negative.

        A future-dated appointment counts as zero days ago, so an owner
        with a booking ahead is never reported as overdue.
        """
        return max(0, self.calendar.whole_days_between(last_appointment_date, now))

    def classify_history(
        self,
        last_appointment_date: Optional[datetime],
        appointment_count: int,
        now: datetime,
    ) -> RetentionCategory:
        """Classify from the raw inputs of the retention rule.

        Raises
        ------
        InvalidInputError
            If ``appointment_count`` is negative.
        """
        if appointment_count < 0:
            raise InvalidInputError(
                f"Appointment count cannot be negative: {appointment_count}"
            )
        if last_appointment_date is None:
            return RetentionCategory.NEW_CLIENT

        days = self.days_since(last_appointment_date, now)
        cfg = self.config

        # First match wins; inactivity outranks the new-client heuristic.
        if days > cfg.inactive_window_days:
            return RetentionCategory.INACTIVE
        if days > cfg.retention_risk_window_days:
            return RetentionCategory.RETENTION_RISK
        if appointment_count <= 1 and days <= cfg.new_client_window_days:
            return RetentionCategory.NEW_CLIENT
        if days <= cfg.active_window_days:
            return RetentionCategory.ACTIVE
        return RetentionCategory.RETURNING

    def classify(self, owner: Owner, now: datetime) -> RetentionCategory:
        """Classify a single owner at the instant ``now``.

        Examples
        --------
        >>> from datetime import datetime
        >>> from furfolio_analytics.foundation.records import AppointmentRecord, Owner
        >>> now = datetime(2024, 6, 30)
        >>> owner = Owner("O1", "Ada", [AppointmentRecord("A1", datetime(2024, 6, 25), "O1")])
        >>> RetentionClassifier().classify(owner, now).value
        'new_client'
        """
        return self.classify_history(
            owner.last_appointment_date, owner.appointment_count, now
        )

    def days_since_last_appointment(
        self, owner: Owner, now: datetime
    ) -> Optional[int]:
        last = owner.last_appointment_date
        if last is None:
            return None
        return self.days_since(last, now)

    def filter_by_category(
        self,
        owners: Iterable[Owner],
        category: RetentionCategory,
        now: datetime,
    ) -> tuple[Owner, ...]:
        """Owners in ``category``, in their input order."""
        return tuple(owner for owner in owners if self.classify(owner, now) == category)

    def stats_by_category(
        self, owners: Iterable[Owner], now: datetime
    ) -> dict[RetentionCategory, int]:
        """Count owners per category.

        Every category is present in the result, zero-filled, so dashboards
        can render empty buckets.
        """
        counts = {category: 0 for category in RetentionCategory}
        for owner in owners:
            counts[self.classify(owner, now)] += 1
        return counts
