"""Appointment ordering for a groomer's day route.

This is a placeholder for real route optimization. It only orders stops by
appointment time and does not look at locations or travel distance; a
traveling-salesman style solver is expected to replace it.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from furfolio_analytics.foundation.calendar import UTC_CALENDAR, ReferenceCalendar
from furfolio_analytics.foundation.records import AppointmentRecord


def order_by_date(
    appointments: Iterable[AppointmentRecord],
    start: Optional[Any] = None,
    calendar: Optional[ReferenceCalendar] = None,
) -> tuple[AppointmentRecord, ...]:
    """Order appointments by date, earliest first.

    The sort is stable: appointments at the same instant keep their input
    order. ``start`` (a starting location) is accepted so call sites can
    already pass it, but the date ordering ignores it.

    Parameters
    ----------
    appointments:
        Appointments to visit
    start:
        Optional starting location, currently unused
    calendar:
        Calendar used to compare naive and aware dates consistently

    Returns
    -------
    tuple[AppointmentRecord, ...]
        A new tuple; the input is not modified.
    """
    # TODO: replace with a TSP solver once appointments carry coordinates.
    localize = (calendar or UTC_CALENDAR).localize
    return tuple(sorted(appointments, key=lambda appointment: localize(appointment.date)))
