"""
Unit tests for the SQLAlchemy DataSource adapter.
"""
from datetime import datetime, timezone

import pytest

from fieldreports.core.exceptions import QueryFailure
from fieldreports.reporting.database import Lead, Project, Visit
from fieldreports.reporting.datasource import SqlDataSource, sql_data_source

UTC = timezone.utc


@pytest.fixture
async def seeded(session_factory):
    async with session_factory() as session:
        session.add_all([
            Project(id=1, name="Early", revenue=10.0, status="completed",
                    created_at=datetime(2023, 12, 31, 23, 59, tzinfo=UTC)),
            Project(id=2, name="Start", revenue=None, status="open",
                    created_at=datetime(2024, 1, 1, 0, 0, tzinfo=UTC)),
            Project(id=3, name="Middle", revenue=250.5, status="completed",
                    created_at=datetime(2024, 1, 15, 12, 0, tzinfo=UTC)),
            Project(id=4, name="End", revenue=99.0, status="open",
                    created_at=datetime(2024, 1, 31, 0, 0, tzinfo=UTC)),
            Lead(id=1, name="Ana", email="ana@example.com", status="converted", source="Website",
                 created_at=datetime(2024, 1, 10, tzinfo=UTC)),
            Visit(id=1, project_id=3, user_id="u-1", visit_type="inspection", status="completed",
                  scheduled_date=datetime(2024, 1, 12, 9, 0, tzinfo=UTC), duration_minutes=40),
        ])
        await session.commit()
    return session_factory


async def test_bounds_are_inclusive(seeded):
    async with sql_data_source(seeded) as source:
        records = await source.query(
            "projects",
            gte=("created_at", datetime(2024, 1, 1, tzinfo=UTC)),
            lte=("created_at", datetime(2024, 1, 31, tzinfo=UTC)),
        )

    assert [r["id"] for r in records] == [2, 3, 4]


async def test_records_are_plain_dicts(seeded):
    async with sql_data_source(seeded) as source:
        records = await source.query(
            "projects",
            gte=("created_at", datetime(2024, 1, 15, tzinfo=UTC)),
            lte=("created_at", datetime(2024, 1, 16, tzinfo=UTC)),
        )

    assert records == [{
        "id": 3,
        "name": "Middle",
        "revenue": 250.5,
        "status": "completed",
        "created_at": "2024-01-15T12:00:00",
    }]


async def test_visits_by_scheduled_date(seeded):
    async with sql_data_source(seeded) as source:
        records = await source.query(
            "visits",
            gte=("scheduled_date", datetime(2024, 1, 1, tzinfo=UTC)),
            lte=("scheduled_date", datetime(2024, 1, 31, tzinfo=UTC)),
        )

    assert len(records) == 1
    assert records[0]["duration_minutes"] == 40
    assert records[0]["user_id"] == "u-1"


async def test_unknown_entity(seeded):
    async with seeded() as session:
        source = SqlDataSource(session)
        with pytest.raises(QueryFailure) as exc_info:
            await source.query("invoices", gte=("created_at", None), lte=("created_at", None))
    assert exc_info.value.entity == "invoices"


async def test_unknown_field(seeded):
    async with seeded() as session:
        with pytest.raises(QueryFailure):
            await SqlDataSource(session).query(
                "leads",
                gte=("updated_at", datetime(2024, 1, 1, tzinfo=UTC)),
                lte=("updated_at", datetime(2024, 2, 1, tzinfo=UTC)),
            )


async def test_database_errors_become_query_failures(session_factory):
    async with session_factory() as session:
        await session.run_sync(lambda s: Lead.__table__.drop(s.connection()))
        with pytest.raises(QueryFailure) as exc_info:
            await SqlDataSource(session).query(
                "leads",
                gte=("created_at", datetime(2024, 1, 1, tzinfo=UTC)),
                lte=("created_at", datetime(2024, 2, 1, tzinfo=UTC)),
            )
    assert exc_info.value.entity == "leads"
