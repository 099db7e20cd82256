"""Synthetic data generation and validation utilities.

This package produces realistic-but-fake grooming books (owners with their
appointments and charges) to exercise the retention and revenue analyses
without touching real client data.
"""

from .generator import (
    BookScenario,
    DEFAULT_SERVICE_MENU,
    generate_owners,
)
from .validation import (
    ValidationResult,
    check_non_negative_service_amounts,
    check_no_duplicate_ids,
    check_temporal_coverage,
    check_charges_follow_appointments,
)
from .scenarios import (
    BASELINE_SCENARIO,
    HIGH_CHURN_SCENARIO,
    LOYAL_CLIENTELE_SCENARIO,
    HOLIDAY_RUSH_SCENARIO,
    SCENARIOS,
    scenario_with_seed,
)

__all__ = [
    "BookScenario",
    "DEFAULT_SERVICE_MENU",
    "generate_owners",
    "ValidationResult",
    "check_non_negative_service_amounts",
    "check_no_duplicate_ids",
    "check_temporal_coverage",
    "check_charges_follow_appointments",
    "BASELINE_SCENARIO",
    "HIGH_CHURN_SCENARIO",
    "LOYAL_CLIENTELE_SCENARIO",
    "HOLIDAY_RUSH_SCENARIO",
    "SCENARIOS",
    "scenario_with_seed",
]
