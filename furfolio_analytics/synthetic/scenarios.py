"""Pre-configured scenario packs for synthetic grooming books.

Each scenario represents a recognisable salon situation and is handy for
demos and for exercising the retention and revenue analyses end to end.

Examples
--------
>>> from datetime import date
>>> from furfolio_analytics.synthetic import generate_owners
>>> from furfolio_analytics.synthetic.scenarios import HIGH_CHURN_SCENARIO
>>>
>>> owners = generate_owners(200, date(2024, 1, 1), date(2024, 12, 31), HIGH_CHURN_SCENARIO)
"""

from dataclasses import replace

from furfolio_analytics.synthetic.generator import BookScenario

# Default baseline scenario - steady salon with moderate churn
BASELINE_SCENARIO = BookScenario()

# High churn scenario - clients drift away after a visit or two
HIGH_CHURN_SCENARIO = BookScenario(
    visits_per_month=0.6,
    churn_hazard=0.35,
    product_attach_rate=0.15,
    refund_rate=0.05,
)

# Loyal clientele - regulars on a four-week grooming cycle
LOYAL_CLIENTELE_SCENARIO = BookScenario(
    visits_per_month=1.1,
    churn_hazard=0.01,
    product_attach_rate=0.35,
    refund_rate=0.01,
)

# Holiday rush - December bookings spike ahead of family visits
HOLIDAY_RUSH_SCENARIO = BookScenario(
    promo_month=12,
    promo_uplift=2.5,
)

SCENARIOS = {
    "baseline": BASELINE_SCENARIO,
    "high_churn": HIGH_CHURN_SCENARIO,
    "loyal": LOYAL_CLIENTELE_SCENARIO,
    "holiday_rush": HOLIDAY_RUSH_SCENARIO,
}


def scenario_with_seed(name: str, seed: int | None) -> BookScenario:
    """Look up a named scenario and pin its RNG seed."""
    try:
        scenario = SCENARIOS[name]
    except KeyError:
        raise ValueError(
            f"Unknown scenario '{name}'. Available: {', '.join(sorted(SCENARIOS))}"
        ) from None
    return replace(scenario, seed=seed)
