"""Tests for run-rate revenue forecasts."""

from datetime import datetime
from decimal import Decimal

import pytest

from furfolio_analytics.analyses import (
    RevenueAggregator,
    RevenueForecaster,
    TrendDirection,
    trend_direction,
)
from furfolio_analytics.exceptions import InvalidGoalError, InvalidInputError
from furfolio_analytics.foundation import Transaction, TransactionCategory


def txn(tid: str, when: datetime, amount: str, category=TransactionCategory.SERVICE):
    return Transaction(tid, when, Decimal(amount), category, "O1")


class TestForecastNextMonth:
    def test_month_to_date_grown_by_monthly_change(self):
        txns = [
            txn("T1", datetime(2024, 5, 10), "1000"),
            txn("T2", datetime(2024, 6, 5), "1200"),
        ]
        forecast = RevenueForecaster().forecast_next_month(txns, datetime(2024, 6, 20))
        # growth = (1200 - 1000) / 1000 = 0.2 -> 1200 * 1.2
        assert forecast == Decimal("1440.00")

    def test_no_revenue_last_month_means_no_growth(self):
        txns = [txn("T1", datetime(2024, 6, 5), "300")]
        forecast = RevenueForecaster().forecast_next_month(txns, datetime(2024, 6, 20))
        assert forecast == Decimal("300.00")

    def test_never_negative(self):
        txns = [txn("T1", datetime(2024, 6, 5), "-50", TransactionCategory.REFUND)]
        forecast = RevenueForecaster().forecast_next_month(txns, datetime(2024, 6, 20))
        assert forecast == Decimal("0.00")

    def test_excluded_categories_follow_aggregator(self):
        txns = [
            txn("T1", datetime(2024, 6, 5), "300"),
            txn("T2", datetime(2024, 6, 6), "700", TransactionCategory.GIFT_CARD),
        ]
        forecaster = RevenueForecaster(
            RevenueAggregator(excluded_categories=[TransactionCategory.GIFT_CARD])
        )
        assert forecaster.forecast_next_month(txns, datetime(2024, 6, 20)) == Decimal("300.00")


class TestForecastMonths:
    def test_flat_average_of_lookback(self):
        txns = [
            txn("T1", datetime(2024, 4, 10), "600"),
            txn("T2", datetime(2024, 5, 10), "1200"),
            txn("T3", datetime(2024, 6, 10), "5000"),  # current month ignored
        ]
        forecaster = RevenueForecaster(lookback_months=3)
        forecasts = forecaster.forecast_months(txns, 2, datetime(2024, 6, 20))
        assert [f.month_start.replace(tzinfo=None) for f in forecasts] == [
            datetime(2024, 7, 1),
            datetime(2024, 8, 1),
        ]
        # (0 + 1200 + 600) / 3
        assert all(f.projected_revenue == Decimal("600.00") for f in forecasts)

    def test_months_must_be_positive(self):
        with pytest.raises(InvalidInputError, match="months must be at least 1"):
            RevenueForecaster().forecast_months([], 0, datetime(2024, 6, 20))

    def test_lookback_must_be_positive(self):
        with pytest.raises(InvalidInputError, match="lookback_months"):
            RevenueForecaster(lookback_months=0)


class TestForecastFullYear:
    def test_year_to_date_run_rate(self):
        txns = [txn("T1", datetime(2023, 1, 5), "3100")]
        # 31 elapsed days in January including today, 365 days in 2023
        forecast = RevenueForecaster().forecast_full_year(txns, datetime(2023, 1, 31, 12))
        assert forecast == Decimal("36500.00")

    def test_first_day_of_year_divides_by_one(self):
        txns = [txn("T1", datetime(2023, 1, 1, 9), "10")]
        forecast = RevenueForecaster().forecast_full_year(txns, datetime(2023, 1, 1, 18))
        assert forecast == Decimal("3650.00")


class TestForecastGoalProgress:
    def test_projected_progress(self):
        txns = [txn("T1", datetime(2024, 6, 3), "1000")]
        # 10 elapsed days of a 30-day month: 1000 / 10 * 30 = 3000
        result = RevenueForecaster().forecast_goal_progress(
            txns, Decimal("6000"), datetime(2024, 6, 10, 8)
        )
        assert result.month_to_date == Decimal("1000")
        assert result.projected_total == Decimal("3000.00")
        assert result.progress == Decimal("0.5000")

    def test_progress_capped_at_one(self):
        txns = [txn("T1", datetime(2024, 6, 3), "9000")]
        result = RevenueForecaster().forecast_goal_progress(
            txns, 1000, datetime(2024, 6, 10)
        )
        assert result.progress == Decimal("1")

    def test_non_positive_goal_rejected(self):
        with pytest.raises(InvalidGoalError):
            RevenueForecaster().forecast_goal_progress([], 0, datetime(2024, 6, 10))


class TestTrendDirection:
    @pytest.mark.parametrize(
        "growth, expected",
        [
            (Decimal("12.5"), TrendDirection.GROWTH),
            (Decimal("-3"), TrendDirection.DECLINE),
            (Decimal("0.5"), TrendDirection.STEADY),
            (Decimal("-1"), TrendDirection.STEADY),
        ],
    )
    def test_default_band(self, growth, expected):
        assert trend_direction(growth) == expected

    def test_custom_band(self):
        assert trend_direction(Decimal("4"), steady_band=Decimal("5")) == TrendDirection.STEADY
