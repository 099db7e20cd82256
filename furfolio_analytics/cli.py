"""Command line entry points for Furfolio analytics."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from furfolio_analytics.analyses.alerts import (
    alert_summary,
    generate_alerts,
    highest_priority_alert,
)
from furfolio_analytics.analyses.forecast import RevenueForecaster, trend_direction
from furfolio_analytics.analyses.retention import RetentionClassifier
from furfolio_analytics.analyses.revenue import RevenueAggregator
from furfolio_analytics.exceptions import AnalyticsError
from furfolio_analytics.foundation.calendar import ReferenceCalendar
from furfolio_analytics.foundation.records import Owner, TransactionCategory
from furfolio_analytics.instrumentation import (
    InstrumentedAnalytics,
    OperationLog,
    configure_logging,
)
from furfolio_analytics.io import all_transactions, load_book, save_book
from furfolio_analytics.pandas import daily_revenue_to_dataframe
from furfolio_analytics.settings import AnalyticsSettings, load_settings
from furfolio_analytics.synthetic import (
    SCENARIOS,
    check_charges_follow_appointments,
    check_no_duplicate_ids,
    check_non_negative_service_amounts,
    check_temporal_coverage,
    generate_owners,
    scenario_with_seed,
)

logger = logging.getLogger(__name__)

EXIT_INVALID_INPUT = 2


def _money(value: Decimal) -> str:
    return str(value)


def _iso_datetime(raw: str) -> datetime:
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO datetime: {raw}") from None


def _decimal_amount(raw: str) -> Decimal:
    try:
        return Decimal(raw)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a decimal amount: {raw}") from None


def _resolve_now(now: Optional[datetime], calendar: ReferenceCalendar) -> datetime:
    if now is None:
        return datetime.now(calendar.tz)
    return calendar.localize(now)


def _configure_cli_logging() -> None:
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=logging.INFO)


def _write_json(payload: dict[str, Any], output: Optional[Path]) -> None:
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        with output.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, sort_keys=True)
        logger.info(f"Report written to {output}")
    else:  # stdout fallback enables piping in shell usage.
        json.dump(payload, fp=sys.stdout, indent=2, sort_keys=True)
        print()


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("book", type=Path, help="Path to JSON book of owners")
    parser.add_argument(
        "--now",
        type=_iso_datetime,
        help="Reference instant (ISO format). Defaults to the current time.",
    )
    parser.add_argument(
        "--timezone",
        type=str,
        help="IANA timezone for day/month boundaries (default: $FURFOLIO_TIMEZONE or UTC)",
    )
    parser.add_argument(
        "--config", type=Path, help="Optional JSON settings file"
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Optional path for writing the report as JSON (default: stdout)",
    )
    parser.add_argument(
        "--log-operations",
        action="store_true",
        help="Emit a structured log event to stderr for every analytics call",
    )


def _instrument(target: Any, enabled: bool, log: OperationLog, prefix: str) -> Any:
    if not enabled:
        return target
    return InstrumentedAnalytics(target, log=log, prefix=prefix)


def _log_operation_summary(log: OperationLog) -> None:
    for operation, stats in sorted(log.summary().items()):
        logger.info(
            f"{operation}: {stats.total_calls} calls, "
            f"avg {stats.avg_duration_ms:.2f} ms, "
            f"{stats.success_rate_pct:.0f}% success"
        )


def build_revenue_report(
    owners: list[Owner],
    settings: AnalyticsSettings,
    now: datetime,
    *,
    log_operations: bool = False,
    operation_log: Optional[OperationLog] = None,
) -> dict[str, Any]:
    """Assemble the revenue dashboard payload for ``owners`` at ``now``."""
    if operation_log is None:
        operation_log = OperationLog()
    calendar = settings.calendar()
    base_aggregator = RevenueAggregator(
        excluded_categories=settings.excluded_categories, calendar=calendar
    )
    aggregator = _instrument(base_aggregator, log_operations, operation_log, "revenue")
    forecaster = _instrument(
        RevenueForecaster(base_aggregator), log_operations, operation_log, "forecast"
    )
    transactions = all_transactions(owners)

    daily = aggregator.daily_revenue(transactions, settings.daily_window_days, now)
    growth = aggregator.revenue_growth(transactions, settings.growth_window_days, now)

    report: dict[str, Any] = {
        "as_of": now.isoformat(),
        "timezone": settings.resolved_timezone(),
        "excluded_categories": sorted(c.value for c in settings.excluded_categories),
        "total_revenue": _money(aggregator.total_revenue(transactions)),
        "daily_revenue": [
            {"day": entry.day.isoformat(), "total": _money(entry.total)}
            for entry in daily
        ],
        "revenue_by_category": [
            {
                "category": entry.category.value,
                "display_name": entry.category.display_name,
                "total": _money(entry.total),
            }
            for entry in aggregator.revenue_by_category(transactions)
        ],
        "top_owners": [
            {
                "owner_id": entry.owner.owner_id,
                "name": entry.owner.name,
                "total": _money(entry.total),
            }
            for entry in aggregator.top_owners(owners, settings.top_owner_count)
        ],
        "revenue_growth": {
            "window_days": settings.growth_window_days,
            "percent": _money(growth),
            "trend": trend_direction(growth).value,
        },
        "forecast": {
            "next_month": _money(forecaster.forecast_next_month(transactions, now)),
            "full_year": _money(forecaster.forecast_full_year(transactions, now)),
        },
        "monthly_goal": None,
    }

    if settings.monthly_goal is not None:
        progress = aggregator.monthly_goal_progress(
            transactions, settings.monthly_goal, now
        )
        projection = forecaster.forecast_goal_progress(
            transactions, settings.monthly_goal, now
        )
        report["monthly_goal"] = {
            "goal_amount": _money(progress.goal_amount),
            "month_to_date": _money(progress.total),
            "progress": _money(progress.progress),
            "projected_total": _money(projection.projected_total),
            "projected_progress": _money(projection.progress),
        }

    return report


def build_retention_report(
    owners: list[Owner],
    settings: AnalyticsSettings,
    now: datetime,
    *,
    log_operations: bool = False,
    operation_log: Optional[OperationLog] = None,
) -> dict[str, Any]:
    """Assemble the retention dashboard payload for ``owners`` at ``now``."""
    if operation_log is None:
        operation_log = OperationLog()
    classifier = _instrument(
        RetentionClassifier(settings.retention_config(), settings.calendar()),
        log_operations,
        operation_log,
        "retention",
    )

    alerts = generate_alerts(owners, now, classifier)
    summary = alert_summary(alerts)
    top_alert = highest_priority_alert(summary)

    return {
        "as_of": now.isoformat(),
        "timezone": settings.resolved_timezone(),
        "owners": [
            {
                "owner_id": owner.owner_id,
                "name": owner.name,
                "category": classifier.classify(owner, now).value,
                "appointment_count": owner.appointment_count,
                "last_appointment_date": (
                    owner.last_appointment_date.isoformat()
                    if owner.last_appointment_date is not None
                    else None
                ),
                "days_since_last_appointment": classifier.days_since_last_appointment(
                    owner, now
                ),
            }
            for owner in owners
        ],
        "stats": {
            category.value: count
            for category, count in classifier.stats_by_category(owners, now).items()
        },
        "alerts": {
            "summary": {alert_type.value: count for alert_type, count in summary.items()},
            "highest_priority": (
                {"type": top_alert[0].value, "count": top_alert[1]}
                if top_alert is not None
                else None
            ),
            "items": [
                {
                    "owner_id": alert.owner_id,
                    "alert_type": alert.alert_type.value,
                    "days_since": alert.days_since,
                }
                for alert in alerts
            ],
        },
    }


def revenue_report_cli(argv: list[str] | None = None) -> int:
    """Generate the revenue dashboard report from a JSON book.

    The report covers total revenue, a zero-filled daily series, revenue by
    category, the top owners, period-over-period growth, run-rate forecasts
    and, when a goal is configured, monthly goal progress.

    Args:
        argv: Command line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, 1 for an empty book, 2 for invalid input)
    """
    parser = argparse.ArgumentParser(
        description="Generate a revenue report from a Furfolio book"
    )
    _add_common_arguments(parser)
    parser.add_argument(
        "--days",
        type=int,
        help="Days in the daily revenue series and growth window (default: 30)",
    )
    parser.add_argument(
        "--goal", type=_decimal_amount, help="Monthly revenue goal for progress tracking"
    )
    parser.add_argument(
        "--top", type=int, help="Number of top owners to report (default: 3)"
    )
    parser.add_argument(
        "--exclude",
        action="append",
        choices=[item.value for item in TransactionCategory],
        help="Transaction category to leave out of revenue (repeatable)",
    )
    parser.add_argument(
        "--daily-csv",
        type=Path,
        help="Optional path for exporting the daily revenue series as CSV",
    )

    args = parser.parse_args(argv)
    _configure_cli_logging()
    if args.log_operations:
        configure_logging()

    try:
        settings = load_settings(
            args.config,
            timezone=args.timezone,
            excluded_categories=args.exclude,
            daily_window_days=args.days,
            growth_window_days=args.days,
            top_owner_count=args.top,
            monthly_goal=args.goal,
        )
        logger.info(f"Loading book from {args.book}")
        owners = load_book(args.book)
        if not owners:
            logger.error("No owners found in input file")
            return 1

        now = _resolve_now(args.now, settings.calendar())
        logger.info(
            f"Computing revenue for {len(owners)} owners as of {now.isoformat()}"
        )
        operation_log = OperationLog()
        report = build_revenue_report(
            owners,
            settings,
            now,
            log_operations=args.log_operations,
            operation_log=operation_log,
        )
    except (AnalyticsError, ValidationError, json.JSONDecodeError) as exc:
        logger.error(f"Invalid input: {exc}")
        return EXIT_INVALID_INPUT

    if args.log_operations:
        _log_operation_summary(operation_log)

    if args.daily_csv:
        aggregator = RevenueAggregator(
            excluded_categories=settings.excluded_categories,
            calendar=settings.calendar(),
        )
        daily = aggregator.daily_revenue(
            all_transactions(owners), settings.daily_window_days, now
        )
        args.daily_csv.parent.mkdir(parents=True, exist_ok=True)
        daily_revenue_to_dataframe(daily).to_csv(args.daily_csv, index=False)
        logger.info(f"Daily revenue exported to {args.daily_csv}")

    _write_json(report, args.output)
    logger.info(
        f"Total revenue {report['total_revenue']}, "
        f"growth {report['revenue_growth']['percent']}%"
    )
    return 0


def retention_report_cli(argv: list[str] | None = None) -> int:
    """Classify every owner of a JSON book and summarise retention alerts.

    Args:
        argv: Command line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, 1 for an empty book, 2 for invalid input)
    """
    parser = argparse.ArgumentParser(
        description="Generate a retention report from a Furfolio book"
    )
    _add_common_arguments(parser)

    args = parser.parse_args(argv)
    _configure_cli_logging()
    if args.log_operations:
        configure_logging()

    try:
        settings = load_settings(args.config, timezone=args.timezone)
        logger.info(f"Loading book from {args.book}")
        owners = load_book(args.book)
        if not owners:
            logger.error("No owners found in input file")
            return 1

        now = _resolve_now(args.now, settings.calendar())
        operation_log = OperationLog()
        report = build_retention_report(
            owners,
            settings,
            now,
            log_operations=args.log_operations,
            operation_log=operation_log,
        )
    except (AnalyticsError, ValidationError, json.JSONDecodeError) as exc:
        logger.error(f"Invalid input: {exc}")
        return EXIT_INVALID_INPUT

    if args.log_operations:
        _log_operation_summary(operation_log)

    _write_json(report, args.output)
    highest = report["alerts"]["highest_priority"]
    if highest is not None:
        logger.info(f"Most urgent alert: {highest['count']} owners {highest['type']}")
    return 0


def generate_book_cli(argv: list[str] | None = None) -> int:
    """Write a synthetic grooming book for demos and testing."""
    parser = argparse.ArgumentParser(description="Generate a synthetic Furfolio book")
    parser.add_argument("--owners", type=int, required=True, help="Number of owners")
    parser.add_argument(
        "--start", type=date.fromisoformat, required=True, help="First day (YYYY-MM-DD)"
    )
    parser.add_argument(
        "--end", type=date.fromisoformat, required=True, help="Last day (YYYY-MM-DD)"
    )
    parser.add_argument("--seed", type=int, help="RNG seed for reproducible books")
    parser.add_argument(
        "--scenario",
        choices=sorted(SCENARIOS),
        default="baseline",
        help="Scenario pack to draw from (default: baseline)",
    )
    parser.add_argument(
        "--output", type=Path, required=True, help="Path for the generated JSON book"
    )

    args = parser.parse_args(argv)
    _configure_cli_logging()
    scenario = scenario_with_seed(args.scenario, args.seed)
    logger.info(
        f"Generating {args.owners} owners from {args.start} to {args.end} "
        f"(scenario={args.scenario}, seed={args.seed})"
    )
    owners = generate_owners(args.owners, args.start, args.end, scenario)

    checks = [
        check_non_negative_service_amounts(owners),
        check_no_duplicate_ids(owners),
        check_charges_follow_appointments(owners),
    ]
    if owners:
        checks.append(check_temporal_coverage(owners, start=args.start, end=args.end))
    for result in checks:
        if not result.ok:
            logger.warning(f"Synthetic book check failed: {result.message}")

    save_book(owners, args.output)
    logger.info(
        f"Wrote {len(owners)} owners with "
        f"{sum(o.appointment_count for o in owners)} appointments to {args.output}"
    )
    return 0


def main() -> None:
    raise SystemExit(revenue_report_cli())


if __name__ == "__main__":  # pragma: no cover
    main()
