"""Retention and revenue analyses for the grooming business dashboard.

1. Retention classification - which owners are new, active, returning,
   at risk, or inactive
2. Retention alerts - owners the front desk should follow up with
3. Revenue aggregation - totals, daily series, categories, top owners,
   goal progress, growth
4. Revenue forecasts - run-rate projections for the month and year
5. Route ordering - appointment ordering placeholder for route planning
"""

from .alerts import (
    RetentionAlert,
    RetentionAlertType,
    alert_summary,
    generate_alerts,
    highest_priority_alert,
    inactive_owners,
    owners_at_risk,
)
from .forecast import (
    GoalForecast,
    MonthlyForecast,
    RevenueForecaster,
    TrendDirection,
    trend_direction,
)
from .retention import RetentionCategory, RetentionClassifier, RetentionConfig
from .revenue import (
    CategoryRevenue,
    DailyRevenue,
    GoalProgress,
    OwnerRevenue,
    RevenueAggregator,
)
from .routing import order_by_date

__all__ = [
    # Retention
    "RetentionCategory",
    "RetentionClassifier",
    "RetentionConfig",
    # Alerts
    "RetentionAlert",
    "RetentionAlertType",
    "alert_summary",
    "generate_alerts",
    "highest_priority_alert",
    "inactive_owners",
    "owners_at_risk",
    # Revenue
    "CategoryRevenue",
    "DailyRevenue",
    "GoalProgress",
    "OwnerRevenue",
    "RevenueAggregator",
    # Forecast
    "GoalForecast",
    "MonthlyForecast",
    "RevenueForecaster",
    "TrendDirection",
    "trend_direction",
    # Routing
    "order_by_date",
]
