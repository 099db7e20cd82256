"""Tests for retention alerts."""

from datetime import datetime, timedelta

from furfolio_analytics.analyses import (
    RetentionAlertType,
    RetentionClassifier,
    RetentionConfig,
    alert_summary,
    generate_alerts,
    highest_priority_alert,
    inactive_owners,
    owners_at_risk,
)
from furfolio_analytics.foundation import AppointmentRecord, Owner

NOW = datetime(2024, 6, 30, 12, 0)


def make_owner(owner_id: str, *days_ago: int) -> Owner:
    return Owner(
        owner_id,
        f"Owner {owner_id}",
        [
            AppointmentRecord(f"{owner_id}-A{i}", NOW - timedelta(days=d), owner_id)
            for i, d in enumerate(days_ago)
        ],
    )


OWNERS = [
    make_owner("O1", 3),  # new client
    make_owner("O2", 10, 40),  # active
    make_owner("O3", 90, 120),  # retention risk
    make_owner("O4", 45, 75),  # returning
    make_owner("O5", 250),  # inactive
    make_owner("O6", 61, 100),  # retention risk
]


class TestGenerateAlerts:
    def test_one_alert_per_flagged_owner(self):
        alerts = generate_alerts(OWNERS, NOW)
        assert [(a.owner_id, a.alert_type) for a in alerts] == [
            ("O1", RetentionAlertType.NEW_CLIENT),
            ("O3", RetentionAlertType.RETENTION_RISK),
            ("O5", RetentionAlertType.INACTIVE),
            ("O6", RetentionAlertType.RETENTION_RISK),
        ]

    def test_alert_carries_history(self):
        alert = generate_alerts([make_owner("O3", 90, 120)], NOW)[0]
        assert alert.days_since == 90
        assert alert.last_appointment_date == NOW - timedelta(days=90)

    def test_owner_without_history(self):
        alert = generate_alerts([Owner("O9", "New")], NOW)[0]
        assert alert.alert_type == RetentionAlertType.NEW_CLIENT
        assert alert.days_since is None
        assert alert.last_appointment_date is None

    def test_custom_classifier(self):
        strict = RetentionClassifier(
            RetentionConfig(
                new_client_window_days=7,
                active_window_days=7,
                retention_risk_window_days=7,
                inactive_window_days=30,
            )
        )
        alerts = generate_alerts([make_owner("O2", 10, 40)], NOW, strict)
        assert alerts[0].alert_type == RetentionAlertType.RETENTION_RISK


class TestSummary:
    def test_summary_is_zero_filled(self):
        assert alert_summary([]) == {
            RetentionAlertType.RETENTION_RISK: 0,
            RetentionAlertType.INACTIVE: 0,
            RetentionAlertType.NEW_CLIENT: 0,
        }

    def test_counts(self):
        summary = alert_summary(generate_alerts(OWNERS, NOW))
        assert summary[RetentionAlertType.RETENTION_RISK] == 2
        assert summary[RetentionAlertType.INACTIVE] == 1
        assert summary[RetentionAlertType.NEW_CLIENT] == 1

    def test_retention_risk_is_highest_priority(self):
        summary = alert_summary(generate_alerts(OWNERS, NOW))
        assert highest_priority_alert(summary) == (RetentionAlertType.RETENTION_RISK, 2)

    def test_priority_skips_empty_types(self):
        summary = {
            RetentionAlertType.RETENTION_RISK: 0,
            RetentionAlertType.INACTIVE: 0,
            RetentionAlertType.NEW_CLIENT: 4,
        }
        assert highest_priority_alert(summary) == (RetentionAlertType.NEW_CLIENT, 4)

    def test_no_alerts(self):
        assert highest_priority_alert(alert_summary([])) is None


class TestOwnerLists:
    def test_owners_at_risk(self):
        assert [o.owner_id for o in owners_at_risk(OWNERS, NOW)] == ["O3", "O6"]

    def test_inactive_owners(self):
        assert [o.owner_id for o in inactive_owners(OWNERS, NOW)] == ["O5"]
