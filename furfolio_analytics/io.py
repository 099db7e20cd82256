"""Loading and saving owner "books" as JSON.

A book is the export format the analytics CLI reads: a list of owners, each
carrying its appointment history and transactions::

    {
      "owners": [
        {
          "owner_id": "O-1",
          "name": "Ada Lovelace",
          "appointments": [{"appointment_id": "A-1", "date": "2024-06-01T10:00:00"}],
          "transactions": [
            {"transaction_id": "T-1", "date": "2024-06-01T11:15:00",
             "amount": "85.00", "category": "full_groom"}
          ]
        }
      ]
    }

Payloads are validated with pydantic before being converted into the frozen
domain records; amounts are parsed straight into ``Decimal``.
"""

from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterable, Optional

from pydantic import BaseModel, Field

from furfolio_analytics.exceptions import InvalidInputError
from furfolio_analytics.foundation.calendar import UTC_CALENDAR
from furfolio_analytics.foundation.records import (
    AppointmentRecord,
    Owner,
    Transaction,
    TransactionCategory,
)

MAX_INPUT_BYTES = 25 * 1024 * 1024  # 25 MiB cap to avoid accidental OOM


class AppointmentPayload(BaseModel):
    appointment_id: str
    date: datetime


class TransactionPayload(BaseModel):
    transaction_id: str
    date: datetime
    amount: Decimal
    category: TransactionCategory
    notes: Optional[str] = None


class OwnerPayload(BaseModel):
    """One owner entry of a book."""

    owner_id: str
    name: str
    appointments: list[AppointmentPayload] = Field(default_factory=list)
    transactions: list[TransactionPayload] = Field(default_factory=list)

    def to_owner(self) -> Owner:
        appointments = sorted(
            (
                AppointmentRecord(
                    appointment_id=item.appointment_id,
                    date=item.date,
                    owner_id=self.owner_id,
                )
                for item in self.appointments
            ),
            key=lambda appointment: UTC_CALENDAR.localize(appointment.date),
        )
        transactions = [
            Transaction(
                transaction_id=item.transaction_id,
                date=item.date,
                amount=item.amount,
                category=item.category,
                owner_id=self.owner_id,
                notes=item.notes,
            )
            for item in self.transactions
        ]
        return Owner(
            owner_id=self.owner_id,
            name=self.name,
            appointments=tuple(appointments),
            transactions=tuple(transactions),
        )


class BookPayload(BaseModel):
    owners: list[OwnerPayload] = Field(default_factory=list)


def parse_book(payload: Any) -> list[Owner]:
    """Validate a decoded JSON payload and convert it to owners.

    Raises
    ------
    pydantic.ValidationError
        If the payload does not match the book schema.
    """
    book = BookPayload.model_validate(payload)
    return [owner.to_owner() for owner in book.owners]


def load_book(path: Path) -> list[Owner]:
    """Read and validate a book file.

    Raises
    ------
    InvalidInputError
        If the file is larger than ``MAX_INPUT_BYTES``.
    json.JSONDecodeError
        If the file is not valid JSON.
    pydantic.ValidationError
        If the payload does not match the book schema.
    """
    resolved = path.resolve()
    size = resolved.stat().st_size
    if size > MAX_INPUT_BYTES:
        raise InvalidInputError(
            f"Input file {resolved} is {size} bytes; exceeds limit of {MAX_INPUT_BYTES} bytes"
        )
    with resolved.open("r", encoding="utf-8") as fh:
        payload = json.load(fh)
    return parse_book(payload)


def book_to_dict(owners: Iterable[Owner]) -> dict[str, list[dict[str, object]]]:
    """Return a JSON-serialisable representation of ``owners``."""

    def serialise_owner(owner: Owner) -> dict[str, object]:
        return {
            "owner_id": owner.owner_id,
            "name": owner.name,
            "appointments": [
                {
                    "appointment_id": appointment.appointment_id,
                    "date": appointment.date.isoformat(),
                }
                for appointment in owner.appointments
            ],
            "transactions": [
                {
                    "transaction_id": txn.transaction_id,
                    "date": txn.date.isoformat(),
                    "amount": str(txn.amount),
                    "category": txn.category.value,
                    "notes": txn.notes,
                }
                for txn in owner.transactions
            ],
        }

    return {"owners": [serialise_owner(owner) for owner in owners]}


def save_book(owners: Iterable[Owner], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(book_to_dict(owners), fh, indent=2)


def all_transactions(owners: Iterable[Owner]) -> list[Transaction]:
    """Flatten the transactions of every owner, owner by owner."""
    return [txn for owner in owners for txn in owner.transactions]


def all_appointments(owners: Iterable[Owner]) -> list[AppointmentRecord]:
    return [appointment for owner in owners for appointment in owner.appointments]
