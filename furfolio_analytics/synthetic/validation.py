from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from furfolio_analytics.foundation.records import Owner, TransactionCategory

# Categories whose amounts are legitimately negative
_OUTFLOW_CATEGORIES = frozenset({TransactionCategory.REFUND, TransactionCategory.EXPENSE})


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    message: str = ""


def check_non_negative_service_amounts(owners: Sequence[Owner]) -> ValidationResult:
    """Charges must be >= 0; only refunds and expenses may be negative."""
    for owner in owners:
        for txn in owner.transactions:
            if txn.category in _OUTFLOW_CATEGORIES:
                continue
            if txn.amount < 0:
                return ValidationResult(
                    False,
                    f"{txn.category.value} amount must be >= 0 for transaction {txn.transaction_id}",
                )
    return ValidationResult(True, "charge amounts are non-negative")


def check_no_duplicate_ids(owners: Sequence[Owner]) -> ValidationResult:
    """Validate that owner, appointment and transaction ids are unique.

    Parameters
    ----------
    owners:
        Book to validate.

    Returns
    -------
    ValidationResult
        Names the first kind of id found duplicated.
    """
    id_sets = {
        "owner": [o.owner_id for o in owners],
        "appointment": [a.appointment_id for o in owners for a in o.appointments],
        "transaction": [t.transaction_id for o in owners for t in o.transactions],
    }
    for kind, ids in id_sets.items():
        duplicates = len(ids) - len(set(ids))
        if duplicates:
            return ValidationResult(False, f"found {duplicates} duplicate {kind} ids")
    return ValidationResult(True, "no duplicate ids found")


def _month_key(ts: datetime) -> tuple[int, int]:
    return (ts.year, ts.month)


def check_temporal_coverage(
    owners: Sequence[Owner],
    *,
    start: Optional[date] = None,
    end: Optional[date] = None,
    min_months_with_activity: int = 1,
) -> ValidationResult:
    """Validate that appointments span enough months and stay within range.

    Parameters
    ----------
    owners:
        Book to validate.
    start, end:
        Optional inclusive date range every appointment must fall in.
    min_months_with_activity:
        Minimum number of months that should have at least one appointment.
    """
    dates = [a.date for o in owners for a in o.appointments]
    if not dates:
        return ValidationResult(False, "no appointments to validate")

    months_with_activity = set(_month_key(ts) for ts in dates)
    if len(months_with_activity) < min_months_with_activity:
        return ValidationResult(
            False,
            f"insufficient temporal coverage: {len(months_with_activity)} months < "
            f"{min_months_with_activity} required",
        )

    earliest = min(ts.date() for ts in dates)
    latest = max(ts.date() for ts in dates)
    if start is not None and earliest < start:
        return ValidationResult(
            False, f"appointments precede range start: {earliest} < {start}"
        )
    if end is not None and latest > end:
        return ValidationResult(False, f"appointments exceed range end: {latest} > {end}")

    return ValidationResult(
        True,
        f"temporal coverage adequate: {len(months_with_activity)} months with activity",
    )


def check_charges_follow_appointments(owners: Sequence[Owner]) -> ValidationResult:
    """Every transaction must be booked on a day the owner had an appointment."""
    for owner in owners:
        visit_days = {a.date.date() for a in owner.appointments}
        for txn in owner.transactions:
            if txn.date.date() not in visit_days:
                return ValidationResult(
                    False,
                    f"transaction {txn.transaction_id} of {owner.owner_id} "
                    f"has no appointment on {txn.date.date()}",
                )
    return ValidationResult(True, "every charge matches an appointment day")
