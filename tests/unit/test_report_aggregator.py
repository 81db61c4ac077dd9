"""
Unit tests for ReportAggregator.
Covers each report arm's metrics and detail rows, fallbacks and failure propagation.
"""
from datetime import datetime, timezone

import pytest

from fieldreports.core.config import Settings
from fieldreports.core.exceptions import QueryFailure, UnknownReportType, ValidationFailure
from fieldreports.core.models import MetricFormat, ReportType
from fieldreports.reporting.aggregator import ReportAggregator

UTC = timezone.utc
START = datetime(2024, 1, 1, tzinfo=UTC)
END = datetime(2024, 1, 31, 23, 59, 59, tzinfo=UTC)
NOW = datetime(2024, 2, 1, 8, 0, tzinfo=UTC)


@pytest.fixture
def config():
    return Settings(_env_file=None)


def make_aggregator(source, config):
    return ReportAggregator(source, config=config, clock=lambda: NOW)


def metric_values(document):
    return {m.name: m.value for m in document.metrics}


class TestSalesReport:

    async def test_metrics(self, fake_source, config):
        source = fake_source({"projects": [
            {"revenue": 100, "status": "completed"},
            {"revenue": 50, "status": "open"},
        ]})
        document = await make_aggregator(source, config).generate("sales", START, END)

        assert metric_values(document) == {
            "Total Projects": 2,
            "Completed Projects": 1,
            "Total Revenue": 150,
            "Average Project Value": 75,
        }
        assert [m.name for m in document.metrics] == [
            "Total Projects", "Completed Projects", "Total Revenue", "Average Project Value",
        ]
        assert document.metric("Total Revenue").format == MetricFormat.CURRENCY
        assert document.metric("Total Projects").format is None

    async def test_queries_projects_by_created_at(self, fake_source, config):
        source = fake_source()
        await make_aggregator(source, config).generate("sales", START, END)
        assert source.calls == [("projects", ("created_at", START), ("created_at", END))]

    async def test_missing_revenue_counts_as_zero(self, fake_source, config):
        source = fake_source({"projects": [
            {"id": 1, "name": "A", "revenue": None, "status": "open", "created_at": "2024-01-02T00:00:00"},
            {"id": 2, "name": "B", "status": "completed", "created_at": "2024-01-03T00:00:00"},
            {"id": 3, "name": "C", "revenue": 5, "status": "completed", "created_at": "2024-01-04T00:00:00"},
        ]})
        document = await make_aggregator(source, config).generate("sales", START, END)

        assert [row["revenue"] for row in document.detail] == [0, 0, 5]
        assert document.metric("Total Revenue").value == 5
        assert document.metric("Average Project Value").value == 2

    async def test_average_rounds_half_up(self, fake_source, config):
        source = fake_source({"projects": [{"revenue": 3}, {"revenue": 2}]})
        document = await make_aggregator(source, config).generate("sales", START, END)
        assert document.metric("Average Project Value").value == 3

    async def test_detail_column_order(self, fake_source, config):
        source = fake_source({"projects": [
            {"status": "open", "revenue": 10, "created_at": "2024-01-02T00:00:00",
             "name": "Deck", "id": 7, "internal_note": "ignored"},
        ]})
        document = await make_aggregator(source, config).generate("sales", START, END)

        assert list(document.detail[0]) == ["id", "name", "created_at", "revenue", "status"]
        assert [c.label for c in document.columns] == ["ID", "Name", "Created", "Revenue", "Status"]

    async def test_empty_range(self, fake_source, config):
        document = await make_aggregator(fake_source(), config).generate("sales", START, END)
        assert metric_values(document)["Average Project Value"] == 0
        assert document.detail == []


class TestLeadsReport:

    async def test_zero_records_has_zero_conversion_rate(self, fake_source, config):
        document = await make_aggregator(fake_source(), config).generate("leads", START, END)
        assert document.metric("Conversion Rate").value == 0
        assert document.metric("Total Leads").value == 0
        assert document.source_distribution == []

    async def test_metrics_and_defaults(self, fake_source, config):
        source = fake_source({"leads": [
            {"id": 1, "name": "Ana", "email": "ana@example.com", "status": "converted", "source": "Website"},
            {"id": 2, "name": "Ben", "email": None, "phone": None, "status": "new", "source": None},
            {"id": 3, "name": "Cy", "status": "new", "source": "Website"},
        ]})
        document = await make_aggregator(source, config).generate("leads", START, END)

        assert metric_values(document) == {
            "Total Leads": 3,
            "Converted Leads": 1,
            "Conversion Rate": 33,
        }
        assert document.metric("Conversion Rate").format == MetricFormat.PERCENT
        assert document.detail[1]["email"] == ""
        assert document.detail[1]["phone"] == ""
        assert document.detail[1]["source"] == "Unknown"
        assert list(document.detail[0]) == [
            "id", "name", "email", "phone", "status", "source", "created_at",
        ]

    async def test_source_distribution_in_first_seen_order(self, fake_source, config):
        source = fake_source({"leads": [
            {"source": "Referral"},
            {"source": "Website"},
            {"source": None},
            {"source": "Website"},
        ]})
        document = await make_aggregator(source, config).generate("leads", START, END)

        assert [(s.source, s.count) for s in document.source_distribution] == [
            ("Referral", 1), ("Website", 2), ("Unknown", 1),
        ]

    async def test_conversion_rate_rounds_half_up(self, fake_source, config):
        # 1/8 = 12.5%
        records = [{"status": "converted"}] + [{"status": "new"}] * 7
        document = await make_aggregator(fake_source({"leads": records}), config).generate(
            "leads", START, END
        )
        assert document.metric("Conversion Rate").value == 13


class TestActivityReport:

    async def test_metrics(self, fake_source, config):
        source = fake_source({"visits": [
            {"id": 1, "status": "completed", "duration_minutes": 45},
            {"id": 2, "status": "completed", "duration_minutes": 30},
            {"id": 3, "status": "scheduled", "duration_minutes": None},
        ]})
        document = await make_aggregator(source, config).generate("activity", START, END)

        assert metric_values(document) == {
            "Total Visits": 3,
            "Completed Visits": 2,
            "Completion Rate": "67%",
            "Average Duration": "25 minutes",
        }
        assert document.detail[2]["duration_minutes"] == 0

    async def test_empty_range(self, fake_source, config):
        document = await make_aggregator(fake_source(), config).generate("activity", START, END)
        assert document.metric("Completion Rate").value == "0%"
        assert document.metric("Average Duration").value == "0 minutes"

    async def test_queries_visits_by_scheduled_date(self, fake_source, config):
        source = fake_source()
        await make_aggregator(source, config).generate("activity", START, END)
        assert source.calls[0][0] == "visits"
        assert source.calls[0][1] == ("scheduled_date", START)


class TestDocument:

    async def test_name_and_timestamps(self, fake_source, config):
        document = await make_aggregator(fake_source(), config).generate("sales", START, END)

        assert document.name == "Sales Report - 02/01/2024"
        assert document.generated_at == NOW
        assert document.date_range_start == START
        assert document.date_range_end == END
        assert document.type == ReportType.SALES
        assert len(document.id) == 32

    async def test_range_end_defaults_to_generation_time(self, fake_source, config):
        source = fake_source()
        document = await make_aggregator(source, config).generate("sales", START)
        assert document.date_range_end == NOW
        assert source.calls[0][2] == ("created_at", NOW)

    async def test_naive_bounds_are_taken_as_utc(self, fake_source, config):
        source = fake_source()
        document = await make_aggregator(source, config).generate("sales", datetime(2024, 1, 1))

        assert document.date_range_start == START
        assert document.date_range_end == NOW
        assert source.calls == [("projects", ("created_at", START), ("created_at", NOW))]

    async def test_naive_start_after_aware_end_is_rejected(self, fake_source, config):
        with pytest.raises(ValidationFailure):
            await make_aggregator(fake_source(), config).generate("sales", datetime(2024, 3, 1), END)

    async def test_start_after_end_is_rejected(self, fake_source, config):
        source = fake_source()
        with pytest.raises(ValidationFailure):
            await make_aggregator(source, config).generate("sales", END, START)
        assert source.calls == []

    async def test_unknown_type_falls_back_to_activity(self, fake_source, config, caplog):
        source = fake_source()
        document = await make_aggregator(source, config).generate("analytics", START, END)
        assert document.type == ReportType.ACTIVITY
        assert source.calls[0][0] == "visits"
        assert "falling back to activity" in caplog.text

    async def test_unknown_type_rejected_in_strict_mode(self, fake_source):
        config = Settings(_env_file=None, strict_enums=True)
        with pytest.raises(UnknownReportType):
            await make_aggregator(fake_source(), config).generate("analytics", START, END)


class TestFailures:

    async def test_query_failure_propagates_unchanged(self, failing_source, config):
        with pytest.raises(QueryFailure) as exc_info:
            await make_aggregator(failing_source, config).generate("sales", START, END)
        assert exc_info.value is failing_source.error

    async def test_other_errors_become_query_failures(self, fake_source, config):
        source = fake_source(error=ConnectionError("timeout"))
        with pytest.raises(QueryFailure) as exc_info:
            await make_aggregator(source, config).generate("leads", START, END)
        assert exc_info.value.entity == "leads"
        assert isinstance(exc_info.value.__cause__, ConnectionError)
