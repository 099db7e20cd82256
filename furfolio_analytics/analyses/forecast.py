"""Simple run-rate revenue forecasts.

These projections extrapolate from revenue already booked; they are not
statistical models. They give the business owner a quick sense of where the
month and the year are heading:

- Next month: this month-to-date grown by the month-over-month rate
- Next N months: flat average of recent full months
- Full year: year-to-date daily run-rate over the whole year
- Goal: month-to-date daily run-rate over the whole month, against a goal

Elapsed days always count the day containing ``now``, so a forecast made on
the first of the month divides by one day rather than zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable, Optional

from furfolio_analytics.analyses.revenue import (
    ONE,
    RATIO_PRECISION,
    ZERO,
    RevenueAggregator,
    to_decimal,
)
from furfolio_analytics.exceptions import InvalidGoalError, InvalidInputError
from furfolio_analytics.foundation.calendar import ReferenceCalendar
from furfolio_analytics.foundation.records import Transaction

CURRENCY_PRECISION = Decimal("0.01")
DEFAULT_LOOKBACK_MONTHS = 6
DEFAULT_STEADY_BAND_PCT = Decimal("1")


class TrendDirection(str, Enum):
    """Direction of a revenue trend."""

    GROWTH = "growth"
    DECLINE = "decline"
    STEADY = "steady"


@dataclass(frozen=True)
class MonthlyForecast:
    """Projected revenue for one future month."""

    month_start: datetime
    projected_revenue: Decimal


@dataclass(frozen=True)
class GoalForecast:
    """Month-end projection measured against a monthly goal.

    Attributes
    ----------
    month_to_date:
        Revenue booked so far this month
    projected_total:
        Month-to-date daily run-rate extended to the whole month
    progress:
        ``min(projected_total / goal_amount, 1)``
    goal_amount:
        The monthly goal
    """

    month_to_date: Decimal
    projected_total: Decimal
    progress: Decimal
    goal_amount: Decimal


def trend_direction(
    growth_percent: Decimal, steady_band: Decimal = DEFAULT_STEADY_BAND_PCT
) -> TrendDirection:
    """Classify a growth percentage; changes within ``steady_band`` are steady."""
    if growth_percent > steady_band:
        return TrendDirection.GROWTH
    if growth_percent < -steady_band:
        return TrendDirection.DECLINE
    return TrendDirection.STEADY


class RevenueForecaster:
    """Run-rate forecasts built on a :class:`RevenueAggregator`.

    The aggregator supplies the calendar and the excluded categories, so a
    forecast and the dashboard totals next to it always agree on what counts
    as revenue.
    """

    def __init__(
        self,
        aggregator: Optional[RevenueAggregator] = None,
        lookback_months: int = DEFAULT_LOOKBACK_MONTHS,
    ) -> None:
        if lookback_months < 1:
            raise InvalidInputError(
                f"lookback_months must be at least 1: {lookback_months}"
            )
        self.aggregator = aggregator or RevenueAggregator()
        self.lookback_months = lookback_months

    @property
    def calendar(self) -> ReferenceCalendar:
        return self.aggregator.calendar

    def _elapsed_days(self, period_start: datetime, now: datetime) -> int:
        today = self.calendar.start_of_day(now)
        return max(1, self.calendar.whole_days_between(period_start, today) + 1)

    def month_total(self, transactions: Iterable[Transaction], month_start: datetime) -> Decimal:
        """Revenue over the full calendar month beginning at ``month_start``."""
        next_month = self.calendar.add_months(month_start, 1)
        return self.aggregator.sum_between(
            transactions, month_start, next_month, end_inclusive=False
        )

    def forecast_next_month(
        self, transactions: Iterable[Transaction], now: datetime
    ) -> Decimal:
        """Next month's revenue from this month's pace and growth.

        The month-to-date total is grown by its change over last month's
        full total. With no revenue last month the growth is taken as zero.
        The forecast never goes below zero.
        """
        txns = list(transactions)
        this_month = self.calendar.start_of_month(now)
        last_month = self.calendar.add_months(this_month, -1)

        last_total = self.month_total(txns, last_month)
        this_total = self.aggregator.sum_between(txns, this_month, now)

        growth = (this_total - last_total) / last_total if last_total > 0 else ZERO
        forecast = max(this_total + this_total * growth, ZERO)
        return forecast.quantize(CURRENCY_PRECISION, rounding=ROUND_HALF_UP)

    def forecast_months(
        self,
        transactions: Iterable[Transaction],
        months: int,
        now: datetime,
    ) -> tuple[MonthlyForecast, ...]:
        """Project the average of recent full months over the next ``months``.

        Raises
        ------
        InvalidInputError
            If ``months`` is less than 1.
        """
        if months < 1:
            raise InvalidInputError(f"months must be at least 1: {months}")

        txns = list(transactions)
        this_month = self.calendar.start_of_month(now)
        history = [
            self.month_total(txns, self.calendar.add_months(this_month, -offset))
            for offset in range(1, self.lookback_months + 1)
        ]
        average = (sum(history, ZERO) / len(history)).quantize(
            CURRENCY_PRECISION, rounding=ROUND_HALF_UP
        )
        return tuple(
            MonthlyForecast(
                month_start=self.calendar.add_months(this_month, offset),
                projected_revenue=average,
            )
            for offset in range(1, months + 1)
        )

    def forecast_full_year(
        self, transactions: Iterable[Transaction], now: datetime
    ) -> Decimal:
        """Year-to-date daily run-rate extended over the whole year."""
        year_start = self.calendar.start_of_year(now)
        year_to_date = self.aggregator.sum_between(transactions, year_start, now)
        elapsed = self._elapsed_days(year_start, now)
        projected = year_to_date / elapsed * self.calendar.days_in_year(now)
        return projected.quantize(CURRENCY_PRECISION, rounding=ROUND_HALF_UP)

    def forecast_goal_progress(
        self,
        transactions: Iterable[Transaction],
        monthly_goal: Decimal | int | float | str,
        now: datetime,
    ) -> GoalForecast:
        """Projected month-end revenue against ``monthly_goal``.

        Raises
        ------
        InvalidGoalError
            If ``monthly_goal`` is zero or negative.
        """
        goal = to_decimal(monthly_goal)
        if not goal.is_finite() or goal <= 0:
            raise InvalidGoalError(f"Goal amount must be positive: {monthly_goal}")

        month_start = self.calendar.start_of_month(now)
        month_to_date = self.aggregator.sum_between(transactions, month_start, now)
        elapsed = self._elapsed_days(month_start, now)
        projected = (month_to_date / elapsed * self.calendar.days_in_month(now)).quantize(
            CURRENCY_PRECISION, rounding=ROUND_HALF_UP
        )
        progress = min(projected / goal, ONE).quantize(RATIO_PRECISION, rounding=ROUND_HALF_UP)
        return GoalForecast(
            month_to_date=month_to_date,
            projected_total=projected,
            progress=progress,
            goal_amount=goal,
        )
