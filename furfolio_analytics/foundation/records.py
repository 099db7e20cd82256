"""Plain records consumed by the retention and revenue analyses.

These records are supplied by whichever collaborator persists the business
data (the grooming app's local store, an export file, a test fixture). The
analytics core only reads them: an owner's retention category and revenue
totals are always derived on demand and never written back.

**Timezone Assumptions**: ``date`` fields may be naive or timezone-aware.
Naive values are interpreted as wall-clock time in the
:class:`~furfolio_analytics.foundation.calendar.ReferenceCalendar` passed to
the analysis, so a single dataset should not mix the two.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Generic, Iterator, Optional, Sequence, TypeVar

from furfolio_analytics.exceptions import InvalidInputError
from furfolio_analytics.foundation.calendar import UTC_CALENDAR

T = TypeVar("T")


class TransactionCategory(str, Enum):
    """Categories a charge or credit can be booked under."""

    SERVICE = "service"
    FULL_GROOM = "full_groom"
    BASIC_BATH = "basic_bath"
    NAIL_TRIM = "nail_trim"
    CUSTOM = "custom"
    PRODUCT = "product"
    GIFT_CARD = "gift_card"
    REFUND = "refund"
    EXPENSE = "expense"

    @property
    def display_name(self) -> str:
        """Human-readable name, used for deterministic tie-breaking."""
        return _CATEGORY_DISPLAY_NAMES[self]


_CATEGORY_DISPLAY_NAMES = {
    TransactionCategory.SERVICE: "Service",
    TransactionCategory.FULL_GROOM: "Full Groom",
    TransactionCategory.BASIC_BATH: "Basic Bath",
    TransactionCategory.NAIL_TRIM: "Nail Trim",
    TransactionCategory.CUSTOM: "Custom Service",
    TransactionCategory.PRODUCT: "Product",
    TransactionCategory.GIFT_CARD: "Gift Card",
    TransactionCategory.REFUND: "Refund",
    TransactionCategory.EXPENSE: "Expense",
}


@dataclass(frozen=True)
class Transaction:
    """A dated, categorised monetary charge or credit.

    Attributes
    ----------
    transaction_id:
        Unique identifier assigned by the persisting collaborator
    date:
        When the charge was recorded
    amount:
        Charged amount. Zero and negative values (refunds) are allowed.
    category:
        Category the charge was booked under
    owner_id:
        Identifier of the owner the charge belongs to
    notes:
        Optional free-text note
    """

    transaction_id: str
    date: datetime
    amount: Decimal
    category: TransactionCategory
    owner_id: str
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate transaction fields."""
        if not isinstance(self.date, datetime):
            raise TypeError(
                f"Transaction date must be a datetime: {self.date!r} "
                f"(transaction_id={self.transaction_id})"
            )
        if not isinstance(self.amount, Decimal):
            raise TypeError(
                f"Transaction amount must be a Decimal, got {type(self.amount).__name__} "
                f"(transaction_id={self.transaction_id})"
            )
        if not self.amount.is_finite():
            raise InvalidInputError(
                f"Transaction amount must be finite: {self.amount} "
                f"(transaction_id={self.transaction_id})"
            )
        if not isinstance(self.category, TransactionCategory):
            raise TypeError(
                f"Transaction category must be a TransactionCategory: {self.category!r} "
                f"(transaction_id={self.transaction_id})"
            )


@dataclass(frozen=True)
class AppointmentRecord:
    """Minimal appointment shape needed for retention and routing."""

    appointment_id: str
    date: datetime
    owner_id: str

    def __post_init__(self) -> None:
        if not isinstance(self.date, datetime):
            raise TypeError(
                f"Appointment date must be a datetime: {self.date!r} "
                f"(appointment_id={self.appointment_id})"
            )


@dataclass(frozen=True)
class Owner:
    """A client of the grooming business.

    Attributes
    ----------
    owner_id:
        Unique owner identifier
    name:
        Owner display name, used for tie-breaking in rankings
    appointments:
        Appointment history, normally in chronological order
    transactions:
        Charges and credits booked against this owner
    """

    owner_id: str
    name: str
    appointments: tuple[AppointmentRecord, ...] = ()
    transactions: tuple[Transaction, ...] = ()

    def __post_init__(self) -> None:
        # Accept any sequence but store tuples so the record stays immutable.
        object.__setattr__(self, "appointments", tuple(self.appointments))
        object.__setattr__(self, "transactions", tuple(self.transactions))

    @property
    def last_appointment_date(self) -> Optional[datetime]:
        """Date of the most recent appointment, or None without history.

        Naive and aware dates may be mixed; naive ones compare as UTC.
        """
        if not self.appointments:
            return None
        latest = max(
            self.appointments,
            key=lambda appointment: UTC_CALENDAR.localize(appointment.date),
        )
        return latest.date

    @property
    def appointment_count(self) -> int:
        return len(self.appointments)


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a larger collection fetched from a paging data source.

    Analyses accept any iterable, so a page can be passed wherever a list
    of transactions or owners is expected; only ``items`` is iterated.
    """

    items: Sequence[T]
    total_count: int
    page_index: int = 0
    page_size: int = field(default=0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))
        if self.page_size == 0:
            object.__setattr__(self, "page_size", len(self.items))
        if self.total_count < 0:
            raise InvalidInputError(
                f"Total count cannot be negative: {self.total_count}"
            )
        if self.page_index < 0:
            raise InvalidInputError(
                f"Page index cannot be negative: {self.page_index}"
            )
        if len(self.items) > self.page_size:
            raise InvalidInputError(
                f"Page holds {len(self.items)} items but page_size is {self.page_size}"
            )

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    @property
    def has_next(self) -> bool:
        if self.page_size == 0:
            return False
        return (self.page_index + 1) * self.page_size < self.total_count
