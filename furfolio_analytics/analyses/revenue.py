"""Revenue aggregation over recorded transactions.

Answers the questions the business dashboard asks about money coming in:
- How much did we take in over a date range?
- What does the daily revenue trend look like?
- Which services bring in the most?
- Who are our top clients?
- How close are we to this month's goal?
- Are we growing compared to the previous period?

All operations are pure: they never mutate their inputs and, given the same
transactions and the same ``now``, always return the same result. Amounts are
summed as ``Decimal`` without intermediate rounding; only derived percentages
and ratios are quantized.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from furfolio_analytics.exceptions import (
    InvalidGoalError,
    InvalidInputError,
    InvalidRangeError,
)
from furfolio_analytics.foundation.calendar import UTC_CALENDAR, ReferenceCalendar
from furfolio_analytics.foundation.collation import SortKey, standard_sort_key
from furfolio_analytics.foundation.records import (
    Owner,
    Transaction,
    TransactionCategory,
)

# Standard percentage precision: 2 decimal places (e.g., 12.34%)
PERCENTAGE_PRECISION = Decimal("0.01")

# Goal progress is a ratio in [.., 1]; 4 places keeps basis-point resolution
RATIO_PRECISION = Decimal("0.0001")

# Growth reported when the previous window took in nothing
FIRST_PERIOD_GROWTH_PCT = Decimal("100")

ZERO = Decimal("0")
ONE = Decimal("1")


@dataclass(frozen=True)
class DailyRevenue:
    """Revenue for one calendar day.

    Attributes
    ----------
    day:
        Calendar day in the aggregator's reference calendar
    day_start:
        Aware datetime of the day's first instant
    total:
        Sum of included transaction amounts booked on that day
    """

    day: date
    day_start: datetime
    total: Decimal


@dataclass(frozen=True)
class CategoryRevenue:
    """Revenue total for one transaction category."""

    category: TransactionCategory
    total: Decimal


@dataclass(frozen=True)
class OwnerRevenue:
    """Revenue total for one owner."""

    owner: Owner
    total: Decimal


@dataclass(frozen=True)
class GoalProgress:
    """Progress toward a revenue goal.

    Attributes
    ----------
    total:
        Revenue counted toward the goal
    progress:
        ``min(total / goal_amount, 1)``, quantized to 4 places. May be
        negative when refunds outweigh charges.
    goal_amount:
        The goal the progress was measured against
    """

    total: Decimal
    progress: Decimal
    goal_amount: Decimal

    def __post_init__(self) -> None:
        if self.goal_amount <= 0:
            raise InvalidGoalError(f"Goal amount must be positive: {self.goal_amount}")
        if self.progress > ONE:
            raise ValueError(f"Progress cannot exceed 1: {self.progress}")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class RevenueAggregator:
    """Compute revenue statistics over transactions.

    Parameters
    ----------
    excluded_categories:
        Categories left out of every computation (e.g. refunds, expenses)
    calendar:
        Reference calendar defining "day" and "month". Defaults to UTC.
    name_key:
        Sort key used to break ties between equal totals. Defaults to a
        case- and accent-insensitive, numeric-aware ordering.

    Examples
    --------
    >>> from datetime import datetime
    >>> from decimal import Decimal
    >>> from furfolio_analytics.foundation.records import Transaction, TransactionCategory
    >>> txns = [
    ...     Transaction("T1", datetime(2024, 1, 1), Decimal("100"), TransactionCategory.SERVICE, "O1"),
    ...     Transaction("T2", datetime(2024, 1, 15), Decimal("50"), TransactionCategory.PRODUCT, "O1"),
    ... ]
    >>> RevenueAggregator().total_revenue(txns)
    Decimal('150')
    """

    def __init__(
        self,
        excluded_categories: Iterable[TransactionCategory] = (),
        calendar: Optional[ReferenceCalendar] = None,
        name_key: SortKey = standard_sort_key,
    ) -> None:
        self.excluded_categories = frozenset(excluded_categories)
        self.calendar = calendar or UTC_CALENDAR
        self.name_key = name_key

    # ------------------------------------------------------------------
    # Filtering helpers
    # ------------------------------------------------------------------

    def is_included(self, transaction: Transaction) -> bool:
        return transaction.category not in self.excluded_categories

    def included(self, transactions: Iterable[Transaction]) -> list[Transaction]:
        """Transactions whose category is not excluded, in input order."""
        return [txn for txn in transactions if self.is_included(txn)]

    def sum_between(
        self,
        transactions: Iterable[Transaction],
        start: Optional[datetime],
        end: Optional[datetime],
        *,
        end_inclusive: bool = True,
    ) -> Decimal:
        """Sum included transactions from ``start`` (inclusive) to ``end``.

        Bounds are not validated here; ``total_revenue`` is the checked
        entry point.
        """
        localize = self.calendar.localize
        lower = localize(start) if start is not None else None
        upper = localize(end) if end is not None else None

        total = ZERO
        for txn in self.included(transactions):
            ts = localize(txn.date)
            if lower is not None and ts < lower:
                continue
            if upper is not None and (ts > upper if end_inclusive else ts >= upper):
                continue
            total += txn.amount
        return total

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def total_revenue(
        self,
        transactions: Iterable[Transaction],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Decimal:
        """Sum included transactions dated within ``[start, end]``.

        A missing bound leaves that side of the range open. An empty
        selection sums to zero.

        Raises
        ------
        InvalidRangeError
            If both bounds are given and ``start`` is after ``end``.
        """
        if start is not None and end is not None:
            if self.calendar.localize(start) > self.calendar.localize(end):
                raise InvalidRangeError(
                    f"Range start ({start.isoformat()}) is after range end ({end.isoformat()})"
                )
        return self.sum_between(transactions, start, end)

    def daily_revenue(
        self,
        transactions: Iterable[Transaction],
        days: int,
        now: datetime,
    ) -> tuple[DailyRevenue, ...]:
        """Revenue per day for the ``days`` calendar days ending today.

        "Today" is the calendar day containing ``now``. The result has
        exactly ``days`` entries in ascending order; days without
        transactions have a zero total.

        Raises
        ------
        InvalidInputError
            If ``days`` is less than 1.
        """
        if days < 1:
            raise InvalidInputError(f"days must be at least 1: {days}")

        today = self.calendar.day_of(now)
        window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
        buckets: dict[date, Decimal] = {day: ZERO for day in window}

        for txn in self.included(transactions):
            day = self.calendar.day_of(txn.date)
            if day in buckets:
                buckets[day] += txn.amount

        return tuple(
            DailyRevenue(day=day, day_start=self.calendar.day_start(day), total=buckets[day])
            for day in window
        )

    def revenue_by_category(
        self, transactions: Iterable[Transaction]
    ) -> tuple[CategoryRevenue, ...]:
        """Total revenue per category, highest first.

        Equal totals are ordered by the category's display name so the
        output never depends on input order.
        """
        totals: dict[TransactionCategory, Decimal] = defaultdict(lambda: ZERO)
        for txn in self.included(transactions):
            totals[txn.category] += txn.amount

        ranked = sorted(
            totals.items(),
            key=lambda item: (-item[1], self.name_key(item[0].display_name)),
        )
        return tuple(CategoryRevenue(category=cat, total=total) for cat, total in ranked)

    def owner_total(self, owner: Owner) -> Decimal:
        return sum((txn.amount for txn in self.included(owner.transactions)), ZERO)

    def top_owners(self, owners: Iterable[Owner], n: int) -> tuple[OwnerRevenue, ...]:
        """The ``n`` owners with the highest total, highest first.

        Equal totals are ordered by owner name. ``n <= 0`` yields an empty
        result rather than an error.
        """
        if n <= 0:
            return ()
        ranked = sorted(
            (OwnerRevenue(owner=owner, total=self.owner_total(owner)) for owner in owners),
            key=lambda entry: (-entry.total, self.name_key(entry.owner.name)),
        )
        return tuple(ranked[:n])

    def monthly_goal_progress(
        self,
        transactions: Iterable[Transaction],
        goal_amount: Decimal | int | float | str,
        now: datetime,
    ) -> GoalProgress:
        """Revenue so far in the calendar month containing ``now``.

        Raises
        ------
        InvalidGoalError
            If ``goal_amount`` is zero or negative.
        """
        goal = to_decimal(goal_amount)
        if not goal.is_finite() or goal <= 0:
            raise InvalidGoalError(f"Goal amount must be positive: {goal_amount}")

        month_start = self.calendar.start_of_month(now)
        next_month = self.calendar.start_of_next_month(now)
        total = self.sum_between(transactions, month_start, next_month, end_inclusive=False)
        progress = min(total / goal, ONE).quantize(RATIO_PRECISION, rounding=ROUND_HALF_UP)
        return GoalProgress(total=total, progress=progress, goal_amount=goal)

    def revenue_growth(
        self,
        transactions: Iterable[Transaction],
        days: int,
        now: datetime,
    ) -> Decimal:
        """Percent change of the last ``days`` days over the ``days`` before.

        The current window is ``[now - days, now]`` and the previous window
        ``[now - 2 * days, now - days)``. When the previous window totals
        zero the growth is reported as exactly 100, whatever the current
        window holds; this first-period convention is what dashboards
        display and is intentional.

        Raises
        ------
        InvalidInputError
            If ``days`` is less than 1.
        """
        if days < 1:
            raise InvalidInputError(f"days must be at least 1: {days}")

        txns = list(transactions)
        period_start = self.calendar.add_days(now, -days)
        previous_start = self.calendar.add_days(now, -2 * days)

        current = self.sum_between(txns, period_start, now)
        previous = self.sum_between(txns, previous_start, period_start, end_inclusive=False)

        if previous == 0:
            return FIRST_PERIOD_GROWTH_PCT
        growth = (current - previous) / previous * 100
        return growth.quantize(PERCENTAGE_PRECISION, rounding=ROUND_HALF_UP)
