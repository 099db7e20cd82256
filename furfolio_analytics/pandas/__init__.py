"""Pandas DataFrame adapters for Furfolio analytics components."""

from .transactions import (
    transactions_to_dataframe,
    dataframe_to_transactions,
)
from .revenue import (
    daily_revenue_to_dataframe,
    category_revenue_to_dataframe,
    owner_revenue_to_dataframe,
    daily_revenue_df,
)
from .retention import (
    retention_to_dataframe,
    retention_stats_to_dataframe,
    classify_owners_df,
)

__all__ = [
    # Transaction adapters
    "transactions_to_dataframe",
    "dataframe_to_transactions",
    # Revenue adapters
    "daily_revenue_to_dataframe",
    "category_revenue_to_dataframe",
    "owner_revenue_to_dataframe",
    "daily_revenue_df",
    # Retention adapters
    "retention_to_dataframe",
    "retention_stats_to_dataframe",
    "classify_owners_df",
]
