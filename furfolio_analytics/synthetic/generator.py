from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
import math
import random
from typing import List, Optional

from furfolio_analytics.foundation.records import (
    AppointmentRecord,
    Owner,
    Transaction,
    TransactionCategory,
)

# (category, mean price) pairs a grooming salon typically charges
DEFAULT_SERVICE_MENU: tuple[tuple[TransactionCategory, float], ...] = (
    (TransactionCategory.FULL_GROOM, 85.0),
    (TransactionCategory.BASIC_BATH, 45.0),
    (TransactionCategory.NAIL_TRIM, 20.0),
    (TransactionCategory.CUSTOM, 60.0),
)

_FIRST_NAMES = (
    "Ada", "Bruno", "Chloé", "Dmitri", "Elena", "Farah", "Gus", "Hana",
    "Ines", "Jonah", "Kai", "Lena", "Mateo", "Noor", "Otto", "Priya",
)
_LAST_NAMES = (
    "Abbott", "Brandt", "Castillo", "Doyle", "Eriksen", "Fischer", "Garcia",
    "Haddad", "Ito", "Jensen", "Kowalski", "Lopez", "Moreau", "Nakamura",
)

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class BookScenario:
    """Configuration for synthetic grooming books.

    Attributes
    ----------
    visits_per_month: Average appointments per active owner per month.
    churn_hazard: Monthly probability that an active owner stops booking.
    promo_month: A calendar month that sees more bookings (e.g. holidays).
    promo_uplift: Multiplicative uplift for bookings during the promo month.
    service_menu: (category, mean price) pairs sampled for each visit.
    price_variability: Coefficient in (0, 1] controlling price variance.
    product_attach_rate: Probability a visit also sells a retail product.
    mean_product_price: Average retail product price.
    refund_rate: Probability a visit's service charge is partly refunded.
    seed: Optional RNG seed for reproducibility.
    """

    visits_per_month: float = 0.8
    churn_hazard: float = 0.05
    promo_month: Optional[int] = None
    promo_uplift: float = 1.5
    service_menu: tuple[tuple[TransactionCategory, float], ...] = DEFAULT_SERVICE_MENU
    price_variability: float = 0.2
    product_attach_rate: float = 0.25
    mean_product_price: float = 18.0
    refund_rate: float = 0.02
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.visits_per_month < 0:
            raise ValueError(f"visits_per_month must be >= 0: {self.visits_per_month}")
        for name in ("churn_hazard", "product_attach_rate", "refund_rate"):
            value = getattr(self, name)
            if not 0 <= value <= 1:
                raise ValueError(f"{name} must be within [0, 1]: {value}")
        if self.promo_month is not None and not 1 <= self.promo_month <= 12:
            raise ValueError(f"promo_month must be within 1-12: {self.promo_month}")
        if not self.service_menu:
            raise ValueError("service_menu must not be empty")


def _month_range(start: date, end: date) -> List[date]:
    cur = date(start.year, start.month, 1)
    last = date(end.year, end.month, 1)
    out: List[date] = []
    while cur <= last:
        out.append(cur)
        cur = _next_month(cur)
    return out


def _next_month(month_start: date) -> date:
    if month_start.month == 12:
        return date(month_start.year + 1, 1, 1)
    return date(month_start.year, month_start.month + 1, 1)


def _visits_for_owner_month(rng: random.Random, lam: float) -> int:
    # Poisson draw via Knuth's algorithm; lambdas here are small
    if lam <= 0:
        return 0
    L = math.exp(-lam)
    k = 0
    p = 1.0
    while p > L:
        k += 1
        p *= rng.random()
    return max(0, k - 1)


def _sample_price(rng: random.Random, mean: float, variability: float) -> Decimal:
    variability = min(max(variability, 0.01), 1.0)
    # Log-normal keeps prices positive
    sigma = variability
    mu = math.log(max(mean, 0.01)) - 0.5 * sigma * sigma
    price = math.exp(rng.normalvariate(mu, sigma))
    return Decimal(str(max(price, 0.01))).quantize(CENTS, rounding=ROUND_HALF_UP)


def _random_name(rng: random.Random) -> str:
    return f"{rng.choice(_FIRST_NAMES)} {rng.choice(_LAST_NAMES)}"


def generate_owners(
    n: int,
    start: date,
    end: date,
    scenario: Optional[BookScenario] = None,
) -> List[Owner]:
    """Generate ``n`` owners with appointments and charges between start/end.

    Each owner is acquired on a uniformly random day in the range and books
    a Poisson number of visits per month until they churn. Every visit
    carries one service charge and may add a product sale or a partial
    refund. Appointments and transactions are naive datetimes sorted by
    date; the same scenario seed always yields the same book.
    """

    if n <= 0:
        return []
    if start > end:
        raise ValueError("start date must be <= end date")
    scenario = scenario or BookScenario()
    rng = random.Random(scenario.seed)
    total_days = (end - start).days + 1

    owners: List[Owner] = []
    appointment_seq = 1
    transaction_seq = 1

    for i in range(n):
        owner_id = f"O-{i + 1}"
        name = _random_name(rng)
        acquired = start + timedelta(days=rng.randrange(total_days))

        appointments: List[AppointmentRecord] = []
        transactions: List[Transaction] = []

        for month_start in _month_range(acquired, end):
            if month_start > acquired and rng.random() < scenario.churn_hazard:
                break

            first_day = max(acquired, month_start)
            last_day = min(end, _next_month(month_start) - timedelta(days=1))
            span = (last_day - first_day).days + 1

            uplift = (
                scenario.promo_uplift
                if scenario.promo_month == month_start.month
                else 1.0
            )
            # Partial months get a proportional share of the visit rate
            lam = scenario.visits_per_month * uplift * span / 30.0
            visits = _visits_for_owner_month(rng, lam)
            if month_start <= acquired < _next_month(month_start):
                visits = max(visits, 1)

            for _ in range(visits):
                day = first_day + timedelta(days=rng.randrange(span))
                visit_at = datetime(
                    day.year, day.month, day.day, 8 + rng.randrange(0, 9), rng.randrange(0, 60)
                )
                appointments.append(
                    AppointmentRecord(
                        appointment_id=f"A-{appointment_seq}",
                        date=visit_at,
                        owner_id=owner_id,
                    )
                )
                appointment_seq += 1

                category, mean_price = rng.choice(scenario.service_menu)
                service_price = _sample_price(rng, mean_price, scenario.price_variability)
                charges = [(category, service_price)]
                if rng.random() < scenario.product_attach_rate:
                    charges.append(
                        (
                            TransactionCategory.PRODUCT,
                            _sample_price(
                                rng, scenario.mean_product_price, scenario.price_variability
                            ),
                        )
                    )
                if rng.random() < scenario.refund_rate:
                    refund = (service_price * Decimal("0.5")).quantize(
                        CENTS, rounding=ROUND_HALF_UP
                    )
                    charges.append((TransactionCategory.REFUND, -refund))

                for offset, (charge_category, amount) in enumerate(charges):
                    transactions.append(
                        Transaction(
                            transaction_id=f"T-{transaction_seq}",
                            date=visit_at + timedelta(minutes=45 + offset),
                            amount=amount,
                            category=charge_category,
                            owner_id=owner_id,
                        )
                    )
                    transaction_seq += 1

        appointments.sort(key=lambda a: (a.date, a.appointment_id))
        transactions.sort(key=lambda t: (t.date, t.transaction_id))
        owners.append(
            Owner(
                owner_id=owner_id,
                name=name,
                appointments=tuple(appointments),
                transactions=tuple(transactions),
            )
        )

    return owners
