"""Pandas DataFrame adapters for revenue aggregation."""

from datetime import datetime
from typing import Optional, Sequence

import pandas as pd  # type: ignore

from furfolio_analytics.analyses.revenue import (
    CategoryRevenue,
    DailyRevenue,
    OwnerRevenue,
    RevenueAggregator,
)
from .transactions import dataframe_to_transactions
from ._utils import decimal_to_float


def daily_revenue_to_dataframe(daily: Sequence[DailyRevenue]) -> pd.DataFrame:
    """Convert a daily revenue series to a DataFrame.

    Returns:
        DataFrame with columns: day, day_start, total, in the series' order
        (oldest day first)

    Example:
        >>> daily = RevenueAggregator().daily_revenue(txns, days=7, now=now)
        >>> daily_revenue_to_dataframe(daily).plot(x="day", y="total")
    """
    if not daily:
        return pd.DataFrame(columns=["day", "day_start", "total"])
    return pd.DataFrame(
        [
            {
                "day": entry.day,
                "day_start": entry.day_start,
                "total": decimal_to_float(entry.total),
            }
            for entry in daily
        ]
    )


def category_revenue_to_dataframe(
    by_category: Sequence[CategoryRevenue],
) -> pd.DataFrame:
    """Convert per-category totals to a DataFrame, keeping their ranking.

    Returns:
        DataFrame with columns: category, display_name, total
    """
    if not by_category:
        return pd.DataFrame(columns=["category", "display_name", "total"])
    return pd.DataFrame(
        [
            {
                "category": entry.category.value,
                "display_name": entry.category.display_name,
                "total": decimal_to_float(entry.total),
            }
            for entry in by_category
        ]
    )


def owner_revenue_to_dataframe(top_owners: Sequence[OwnerRevenue]) -> pd.DataFrame:
    """Convert ranked owner totals to a DataFrame.

    Returns:
        DataFrame with columns: rank (1-based), owner_id, name, total
    """
    if not top_owners:
        return pd.DataFrame(columns=["rank", "owner_id", "name", "total"])
    return pd.DataFrame(
        [
            {
                "rank": rank,
                "owner_id": entry.owner.owner_id,
                "name": entry.owner.name,
                "total": decimal_to_float(entry.total),
            }
            for rank, entry in enumerate(top_owners, start=1)
        ]
    )


def daily_revenue_df(
    txn_df: pd.DataFrame,
    days: int,
    now: datetime,
    aggregator: Optional[RevenueAggregator] = None,
) -> pd.DataFrame:
    """Compute the daily revenue series straight from a transactions DataFrame.

    Convenience function combining conversion and aggregation.

    Example:
        >>> txn_df = pd.read_csv("transactions.csv", parse_dates=["date"])
        >>> daily_df = daily_revenue_df(txn_df, days=30, now=datetime(2024, 6, 30))
    """
    transactions = dataframe_to_transactions(txn_df)
    aggregator = aggregator or RevenueAggregator()
    return daily_revenue_to_dataframe(aggregator.daily_revenue(transactions, days, now))
