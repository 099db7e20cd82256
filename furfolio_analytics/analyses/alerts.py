"""Retention alerts derived from owner classification.

Owners who just joined, who are drifting away, or who have gone inactive
warrant follow-up from the front desk. This module turns retention
categories into alert records and summaries; rendering those alerts as
messages, badges or notifications is left to the presentation layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from furfolio_analytics.analyses.retention import RetentionCategory, RetentionClassifier
from furfolio_analytics.foundation.records import Owner


class RetentionAlertType(str, Enum):
    """Alert kinds, declared in priority order (most urgent first)."""

    RETENTION_RISK = "retention_risk"
    INACTIVE = "inactive"
    NEW_CLIENT = "new_client"


_ALERT_FOR_CATEGORY = {
    RetentionCategory.RETENTION_RISK: RetentionAlertType.RETENTION_RISK,
    RetentionCategory.INACTIVE: RetentionAlertType.INACTIVE,
    RetentionCategory.NEW_CLIENT: RetentionAlertType.NEW_CLIENT,
}


@dataclass(frozen=True)
class RetentionAlert:
    """An owner that needs retention follow-up.

    Attributes
    ----------
    owner_id:
        Owner the alert concerns
    alert_type:
        Why the owner needs attention
    last_appointment_date:
        Most recent appointment, or None for owners without history
    days_since:
        Whole days since that appointment (clamped at zero), or None
    """

    owner_id: str
    alert_type: RetentionAlertType
    last_appointment_date: Optional[datetime]
    days_since: Optional[int]


def generate_alerts(
    owners: Iterable[Owner],
    now: datetime,
    classifier: Optional[RetentionClassifier] = None,
) -> tuple[RetentionAlert, ...]:
    """Create one alert per owner that is new, at risk, or inactive.

    Active and returning owners produce no alert. Alerts follow the input
    order of ``owners``.
    """
    classifier = classifier or RetentionClassifier()
    alerts: list[RetentionAlert] = []
    for owner in owners:
        alert_type = _ALERT_FOR_CATEGORY.get(classifier.classify(owner, now))
        if alert_type is None:
            continue
        alerts.append(
            RetentionAlert(
                owner_id=owner.owner_id,
                alert_type=alert_type,
                last_appointment_date=owner.last_appointment_date,
                days_since=classifier.days_since_last_appointment(owner, now),
            )
        )
    return tuple(alerts)


def alert_summary(alerts: Iterable[RetentionAlert]) -> dict[RetentionAlertType, int]:
    """Count alerts per type, with every type present."""
    summary = {alert_type: 0 for alert_type in RetentionAlertType}
    for alert in alerts:
        summary[alert.alert_type] += 1
    return summary


def highest_priority_alert(
    summary: dict[RetentionAlertType, int],
) -> Optional[tuple[RetentionAlertType, int]]:
    """The most urgent alert type with a non-zero count, or None."""
    for alert_type in RetentionAlertType:
        count = summary.get(alert_type, 0)
        if count > 0:
            return alert_type, count
    return None


def owners_at_risk(
    owners: Iterable[Owner],
    now: datetime,
    classifier: Optional[RetentionClassifier] = None,
) -> tuple[Owner, ...]:
    classifier = classifier or RetentionClassifier()
    return classifier.filter_by_category(owners, RetentionCategory.RETENTION_RISK, now)


def inactive_owners(
    owners: Iterable[Owner],
    now: datetime,
    classifier: Optional[RetentionClassifier] = None,
) -> tuple[Owner, ...]:
    classifier = classifier or RetentionClassifier()
    return classifier.filter_by_category(owners, RetentionCategory.INACTIVE, now)
