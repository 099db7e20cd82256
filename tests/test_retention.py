"""Tests for retention classification."""

from datetime import datetime, timedelta, timezone

import pytest

from furfolio_analytics.analyses.retention import (
    RetentionCategory,
    RetentionClassifier,
    RetentionConfig,
)
from furfolio_analytics.exceptions import InvalidInputError
from furfolio_analytics.foundation import (
    AppointmentRecord,
    Owner,
    Page,
    ReferenceCalendar,
)

NOW = datetime(2024, 6, 30, 12, 0)


def make_owner(owner_id: str, *days_ago: int, name: str = "Owner") -> Owner:
    """Owner with one appointment per entry in ``days_ago``."""
    return Owner(
        owner_id=owner_id,
        name=name,
        appointments=[
            AppointmentRecord(f"{owner_id}-A{i}", NOW - timedelta(days=d), owner_id)
            for i, d in enumerate(days_ago)
        ],
    )


class TestRetentionConfig:
    """Test RetentionConfig validation."""

    def test_defaults(self):
        cfg = RetentionConfig()
        assert cfg.new_client_window_days == 14
        assert cfg.active_window_days == 30
        assert cfg.retention_risk_window_days == 60
        assert cfg.inactive_window_days == 180

    def test_non_positive_window_rejected(self):
        with pytest.raises(InvalidInputError, match="active_window_days must be positive"):
            RetentionConfig(active_window_days=0)

    def test_decreasing_windows_rejected(self):
        with pytest.raises(InvalidInputError, match="non-decreasing"):
            RetentionConfig(retention_risk_window_days=200, inactive_window_days=180)


class TestClassify:
    """Test the category precedence rules."""

    def test_five_days_single_visit_is_new_client(self):
        assert RetentionClassifier().classify(make_owner("O1", 5), NOW) == (
            RetentionCategory.NEW_CLIENT
        )

    def test_hundred_days_is_retention_risk(self):
        owner = make_owner("O1", 100, 130, 160)
        assert RetentionClassifier().classify(owner, NOW) == RetentionCategory.RETENTION_RISK

    def test_two_hundred_days_is_inactive(self):
        owner = make_owner("O1", 200, 240)
        assert RetentionClassifier().classify(owner, NOW) == RetentionCategory.INACTIVE

    def test_no_history_is_new_client(self):
        owner = Owner("O1", "Ada")
        assert RetentionClassifier().classify(owner, NOW) == RetentionCategory.NEW_CLIENT

    def test_regular_visitor_is_active(self):
        owner = make_owner("O1", 5, 35, 65)
        assert RetentionClassifier().classify(owner, NOW) == RetentionCategory.ACTIVE

    def test_returning_between_active_and_risk(self):
        owner = make_owner("O1", 45, 90)
        assert RetentionClassifier().classify(owner, NOW) == RetentionCategory.RETURNING

    def test_single_visit_past_new_client_window(self):
        """One visit 20 days ago is no longer new but still active."""
        owner = make_owner("O1", 20)
        assert RetentionClassifier().classify(owner, NOW) == RetentionCategory.ACTIVE

    def test_single_visit_long_ago_is_inactive(self):
        """Inactivity outranks the new-client heuristic."""
        owner = make_owner("O1", 365)
        assert RetentionClassifier().classify(owner, NOW) == RetentionCategory.INACTIVE

    @pytest.mark.parametrize(
        "days, expected",
        [
            (14, RetentionCategory.NEW_CLIENT),
            (15, RetentionCategory.ACTIVE),
            (30, RetentionCategory.ACTIVE),
            (31, RetentionCategory.RETURNING),
            (60, RetentionCategory.RETURNING),
            (61, RetentionCategory.RETENTION_RISK),
            (180, RetentionCategory.RETENTION_RISK),
            (181, RetentionCategory.INACTIVE),
        ],
    )
    def test_window_boundaries(self, days, expected):
        classifier = RetentionClassifier()
        last = NOW - timedelta(days=days)
        assert classifier.classify_history(last, 1, NOW) == expected

    def test_partial_day_does_not_count(self):
        """60 days and 23 hours is still 60 whole days."""
        last = NOW - timedelta(days=60, hours=23)
        assert RetentionClassifier().classify_history(last, 3, NOW) == (
            RetentionCategory.RETURNING
        )

    def test_negative_count_rejected(self):
        with pytest.raises(InvalidInputError, match="cannot be negative"):
            RetentionClassifier().classify_history(NOW, -1, NOW)

    def test_custom_config(self):
        cfg = RetentionConfig(
            new_client_window_days=7,
            active_window_days=14,
            retention_risk_window_days=28,
            inactive_window_days=56,
        )
        owner = make_owner("O1", 30, 50)
        assert RetentionClassifier(cfg).classify(owner, NOW) == RetentionCategory.RETENTION_RISK


class TestFutureAppointments:
    """Future-dated appointments count as zero days ago."""

    def test_days_since_is_clamped(self):
        owner = make_owner("O1", -10, 20)
        assert RetentionClassifier().days_since_last_appointment(owner, NOW) == 0

    def test_future_booking_keeps_owner_active(self):
        owner = make_owner("O1", -3, 90, 120)
        assert RetentionClassifier().classify(owner, NOW) == RetentionCategory.ACTIVE


class TestTimezones:
    def test_aware_now_against_naive_history(self):
        """Naive appointment dates are wall-clock time in the calendar's zone."""
        calendar = ReferenceCalendar("America/Chicago")
        classifier = RetentionClassifier(calendar=calendar)
        owner = Owner(
            "O1",
            "Ada",
            [AppointmentRecord("A1", datetime(2024, 4, 30, 10, 0), "O1")],
        )
        # 2024-06-30 05:00 UTC is 2024-06-30 00:00 in Chicago: 60 days and 14 hours
        now = datetime(2024, 6, 30, 5, 0, tzinfo=timezone.utc)
        assert classifier.days_since_last_appointment(owner, now) == 60

    def test_history_mixing_naive_and_aware_dates(self):
        owner = Owner(
            "O1",
            "Ada",
            [
                AppointmentRecord("A1", datetime(2024, 6, 20, 10, 0), "O1"),
                AppointmentRecord("A2", datetime(2024, 6, 25, 10, 0, tzinfo=timezone.utc), "O1"),
            ],
        )
        classifier = RetentionClassifier()
        assert classifier.days_since_last_appointment(owner, NOW) == 5
        assert classifier.classify(owner, NOW) == RetentionCategory.ACTIVE


class TestCollections:
    """Test filtering and statistics over many owners."""

    @pytest.fixture
    def owners(self):
        return [
            make_owner("O1", 5),
            make_owner("O2", 100, 150),
            make_owner("O3", 10, 40),
            make_owner("O4", 200),
            make_owner("O5", 70, 80),
        ]

    def test_filter_preserves_input_order(self, owners):
        at_risk = RetentionClassifier().filter_by_category(
            owners, RetentionCategory.RETENTION_RISK, NOW
        )
        assert [o.owner_id for o in at_risk] == ["O2", "O5"]

    def test_stats_are_zero_filled(self, owners):
        stats = RetentionClassifier().stats_by_category(owners, NOW)
        assert stats == {
            RetentionCategory.NEW_CLIENT: 1,
            RetentionCategory.ACTIVE: 1,
            RetentionCategory.RETURNING: 0,
            RetentionCategory.RETENTION_RISK: 2,
            RetentionCategory.INACTIVE: 1,
        }

    def test_stats_cover_every_owner(self, owners):
        stats = RetentionClassifier().stats_by_category(owners, NOW)
        assert sum(stats.values()) == len(owners)

    def test_empty_population(self):
        stats = RetentionClassifier().stats_by_category([], NOW)
        assert set(stats) == set(RetentionCategory)
        assert all(count == 0 for count in stats.values())

    def test_accepts_page(self, owners):
        page = Page(items=owners[:2], total_count=len(owners), page_size=2)
        stats = RetentionClassifier().stats_by_category(page, NOW)
        assert sum(stats.values()) == 2

    def test_classification_is_deterministic(self, owners):
        classifier = RetentionClassifier()
        first = [classifier.classify(o, NOW) for o in owners]
        second = [classifier.classify(o, NOW) for o in owners]
        assert first == second
