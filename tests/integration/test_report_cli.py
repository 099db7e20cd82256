"""Integration tests for the report command line tools.

Tests the complete workflow from a JSON book on disk through the CLI
commands to the JSON and CSV reports they write.
"""

import json

import pandas as pd
import pytest
import structlog

from furfolio_analytics.cli import (
    generate_book_cli,
    retention_report_cli,
    revenue_report_cli,
)
from furfolio_analytics.io import MAX_INPUT_BYTES, load_book
from furfolio_analytics.settings import TIMEZONE_ENV_VAR


@pytest.fixture
def sample_book_json(tmp_path):
    """Create a small book spanning May and June 2024."""
    book = {
        "owners": [
            # O1: regular, spends the most
            {
                "owner_id": "O1",
                "name": "Ada",
                "appointments": [
                    {"appointment_id": "A1", "date": "2024-05-10T10:00:00"},
                    {"appointment_id": "A2", "date": "2024-06-10T10:00:00"},
                ],
                "transactions": [
                    {
                        "transaction_id": "T1",
                        "date": "2024-05-10T11:00:00",
                        "amount": "100.00",
                        "category": "full_groom",
                    },
                    {
                        "transaction_id": "T2",
                        "date": "2024-06-10T11:00:00",
                        "amount": "150.00",
                        "category": "full_groom",
                    },
                    {
                        "transaction_id": "T3",
                        "date": "2024-06-10T11:05:00",
                        "amount": "25.00",
                        "category": "gift_card",
                    },
                ],
            },
            # O2: one visit long ago
            {
                "owner_id": "O2",
                "name": "Bo",
                "appointments": [
                    {"appointment_id": "A3", "date": "2024-02-01T09:00:00"}
                ],
                "transactions": [
                    {
                        "transaction_id": "T4",
                        "date": "2024-02-01T09:45:00",
                        "amount": "45.00",
                        "category": "basic_bath",
                    }
                ],
            },
            # O3: brand new, nothing booked yet
            {"owner_id": "O3", "name": "Cy"},
        ]
    }
    path = tmp_path / "book.json"
    path.write_text(json.dumps(book))
    return path


@pytest.fixture
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestRevenueReportCLI:
    """Test furfolio-revenue-report."""

    def test_report_written_to_file(self, sample_book_json, tmp_path):
        output = tmp_path / "out" / "revenue.json"
        exit_code = revenue_report_cli(
            [
                str(sample_book_json),
                "--now",
                "2024-06-15T12:00:00",
                "--days",
                "7",
                "--goal",
                "1000",
                "--output",
                str(output),
            ]
        )

        assert exit_code == 0
        report = json.loads(output.read_text())
        assert report["total_revenue"] == "320.00"
        assert len(report["daily_revenue"]) == 7
        assert report["daily_revenue"][1] == {"day": "2024-06-10", "total": "175.00"}
        assert report["revenue_by_category"][0]["category"] == "full_groom"
        assert [o["owner_id"] for o in report["top_owners"]] == ["O1", "O2", "O3"]
        assert report["monthly_goal"]["month_to_date"] == "175.00"
        assert report["monthly_goal"]["progress"] == "0.1750"
        assert report["revenue_growth"]["percent"] == "100"

    def test_excluded_categories(self, sample_book_json, tmp_path):
        output = tmp_path / "revenue.json"
        exit_code = revenue_report_cli(
            [
                str(sample_book_json),
                "--now",
                "2024-06-15T12:00:00",
                "--exclude",
                "gift_card",
                "--output",
                str(output),
            ]
        )

        assert exit_code == 0
        report = json.loads(output.read_text())
        assert report["total_revenue"] == "295.00"
        assert report["excluded_categories"] == ["gift_card"]
        assert report["monthly_goal"] is None

    def test_stdout_and_daily_csv(self, sample_book_json, tmp_path, capsys):
        csv_path = tmp_path / "daily.csv"
        exit_code = revenue_report_cli(
            [
                str(sample_book_json),
                "--now",
                "2024-06-15T12:00:00",
                "--days",
                "3",
                "--daily-csv",
                str(csv_path),
            ]
        )

        assert exit_code == 0
        report = json.loads(capsys.readouterr().out)
        assert report["as_of"].startswith("2024-06-15T12:00:00")
        daily = pd.read_csv(csv_path)
        assert list(daily.columns) == ["day", "day_start", "total"]
        assert len(daily) == 3

    def test_settings_file_and_timezone(self, sample_book_json, tmp_path):
        settings = tmp_path / "settings.json"
        settings.write_text(json.dumps({"timezone": "America/Chicago", "top_owner_count": 1}))
        output = tmp_path / "revenue.json"
        exit_code = revenue_report_cli(
            [
                str(sample_book_json),
                "--now",
                "2024-06-15T12:00:00",
                "--config",
                str(settings),
                "--output",
                str(output),
            ]
        )

        assert exit_code == 0
        report = json.loads(output.read_text())
        assert report["timezone"] == "America/Chicago"
        assert len(report["top_owners"]) == 1

    def test_invalid_goal_exits_with_2(self, sample_book_json):
        exit_code = revenue_report_cli(
            [str(sample_book_json), "--now", "2024-06-15T12:00:00", "--goal", "0"]
        )
        assert exit_code == 2

    def test_invalid_book_exits_with_2(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"owners": [{"owner_id": "O1"}]}))
        assert revenue_report_cli([str(path)]) == 2

    def test_empty_book_exits_with_1(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text(json.dumps({"owners": []}))
        assert revenue_report_cli([str(path)]) == 1

    def test_malformed_json_exits_with_2(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        assert revenue_report_cli([str(path)]) == 2
        assert retention_report_cli([str(path)]) == 2

    def test_oversized_book_exits_with_2(self, tmp_path):
        path = tmp_path / "huge.json"
        with path.open("wb") as fh:
            fh.truncate(MAX_INPUT_BYTES + 1)
        assert revenue_report_cli([str(path)]) == 2

    def test_missing_file_propagates(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            revenue_report_cli([str(tmp_path / "missing.json")])

    def test_operation_logging(self, sample_book_json, tmp_path, capsys, reset_structlog):
        output = tmp_path / "revenue.json"
        exit_code = revenue_report_cli(
            [
                str(sample_book_json),
                "--now",
                "2024-06-15T12:00:00",
                "--log-operations",
                "--output",
                str(output),
            ]
        )

        assert exit_code == 0
        events = [
            json.loads(line)
            for line in capsys.readouterr().err.splitlines()
            if line.startswith("{")
        ]
        operations = {event["operation"] for event in events}
        assert "revenue.total_revenue" in operations
        assert "forecast.forecast_next_month" in operations


class TestRetentionReportCLI:
    """Test furfolio-retention-report."""

    def test_report(self, sample_book_json, tmp_path):
        output = tmp_path / "retention.json"
        exit_code = retention_report_cli(
            [
                str(sample_book_json),
                "--now",
                "2024-06-15T12:00:00",
                "--output",
                str(output),
            ]
        )

        assert exit_code == 0
        report = json.loads(output.read_text())
        categories = {o["owner_id"]: o["category"] for o in report["owners"]}
        assert categories == {"O1": "active", "O2": "retention_risk", "O3": "new_client"}
        assert report["stats"]["returning"] == 0
        assert report["alerts"]["summary"] == {
            "retention_risk": 1,
            "inactive": 0,
            "new_client": 1,
        }
        assert report["alerts"]["highest_priority"] == {"type": "retention_risk", "count": 1}
        o2 = next(o for o in report["owners"] if o["owner_id"] == "O2")
        assert o2["days_since_last_appointment"] == 135

    def test_unknown_timezone_exits_with_2(self, sample_book_json):
        exit_code = retention_report_cli([str(sample_book_json), "--timezone", "Nowhere/Atlantis"])
        assert exit_code == 2

    def test_unknown_environment_timezone_exits_with_2(self, sample_book_json, monkeypatch):
        monkeypatch.setenv(TIMEZONE_ENV_VAR, "Mars/Olympus")
        args = [str(sample_book_json), "--now", "2024-06-15T12:00:00"]
        assert retention_report_cli(args) == 2
        assert revenue_report_cli(args) == 2


class TestGenerateBookCLI:
    """Test furfolio-generate-book feeding the report tools."""

    def test_generated_book_is_reportable(self, tmp_path):
        book = tmp_path / "synthetic.json"
        exit_code = generate_book_cli(
            [
                "--owners",
                "25",
                "--start",
                "2024-01-01",
                "--end",
                "2024-06-30",
                "--seed",
                "7",
                "--output",
                str(book),
            ]
        )

        assert exit_code == 0
        owners = load_book(book)
        assert len(owners) == 25

        output = tmp_path / "retention.json"
        assert (
            retention_report_cli(
                [str(book), "--now", "2024-07-01T00:00:00", "--output", str(output)]
            )
            == 0
        )
        report = json.loads(output.read_text())
        assert sum(report["stats"].values()) == 25

    def test_same_seed_same_book(self, tmp_path):
        args = ["--owners", "10", "--start", "2024-01-01", "--end", "2024-03-31", "--seed", "3"]
        first, second = tmp_path / "a.json", tmp_path / "b.json"
        assert generate_book_cli(args + ["--output", str(first)]) == 0
        assert generate_book_cli(args + ["--scenario", "baseline", "--output", str(second)]) == 0
        assert first.read_text() == second.read_text()
