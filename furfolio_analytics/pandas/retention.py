"""Pandas DataFrame adapters for retention classification."""

from datetime import datetime
from typing import Iterable, Mapping, Optional

import pandas as pd  # type: ignore

from furfolio_analytics.analyses.retention import RetentionCategory, RetentionClassifier
from furfolio_analytics.foundation.records import Owner

RETENTION_COLUMNS = [
    "owner_id",
    "name",
    "last_appointment_date",
    "appointment_count",
    "days_since_last_appointment",
    "category",
]


def retention_to_dataframe(
    owners: Iterable[Owner],
    now: datetime,
    classifier: Optional[RetentionClassifier] = None,
) -> pd.DataFrame:
    """Classify owners and return one row per owner.

    ``days_since_last_appointment`` is ``None`` for owners without
    appointments.

    Returns:
        DataFrame with columns: owner_id, name, last_appointment_date,
        appointment_count, days_since_last_appointment, category
    """
    classifier = classifier or RetentionClassifier()
    rows = [
        {
            "owner_id": owner.owner_id,
            "name": owner.name,
            "last_appointment_date": owner.last_appointment_date,
            "appointment_count": owner.appointment_count,
            "days_since_last_appointment": classifier.days_since_last_appointment(
                owner, now
            ),
            "category": classifier.classify(owner, now).value,
        }
        for owner in owners
    ]
    if not rows:
        return pd.DataFrame(columns=RETENTION_COLUMNS)
    return pd.DataFrame(rows, columns=RETENTION_COLUMNS)


def retention_stats_to_dataframe(
    stats: Mapping[RetentionCategory, int],
) -> pd.DataFrame:
    """Convert category counts to a DataFrame with a share column.

    Rows follow the category declaration order. ``share`` is 0.0 for every
    row when there are no owners.
    """
    total = sum(stats.values())
    return pd.DataFrame(
        [
            {
                "category": category.value,
                "count": stats.get(category, 0),
                "share": stats.get(category, 0) / total if total else 0.0,
            }
            for category in RetentionCategory
        ]
    )


def classify_owners_df(
    owners: Iterable[Owner],
    now: datetime,
    classifier: Optional[RetentionClassifier] = None,
) -> pd.DataFrame:
    """Per-category counts for ``owners`` as a DataFrame.

    Example:
        >>> stats_df = classify_owners_df(load_book(path), now=datetime(2024, 6, 30))
        >>> stats_df.set_index("category")["count"]["retention_risk"]
    """
    classifier = classifier or RetentionClassifier()
    return retention_stats_to_dataframe(classifier.stats_by_category(owners, now))
