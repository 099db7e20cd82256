"""Foundational building blocks for the analytics core.

This package exposes the plain records the analyses consume, the
reference calendar that defines day and month boundaries, and the
collation used for deterministic name ordering.
"""

from .calendar import UTC_CALENDAR, ReferenceCalendar
from .collation import standard_sort_key
from .records import (
    AppointmentRecord,
    Owner,
    Page,
    Transaction,
    TransactionCategory,
)

__all__ = [
    "AppointmentRecord",
    "Owner",
    "Page",
    "ReferenceCalendar",
    "Transaction",
    "TransactionCategory",
    "UTC_CALENDAR",
    "standard_sort_key",
]
