"""
Shared pytest fixtures for the field reports test suite.
"""
from datetime import datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from fieldreports.core.config import Settings
from fieldreports.core.database import Base
from fieldreports.core.exceptions import QueryFailure
from fieldreports.core.models import MetricFormat, ReportType
from fieldreports.reporting.models import Metric, ReportDocument, SourceCount

# Register models in Base.metadata
from fieldreports.reporting import database as reporting_db  # noqa: F401
from fieldreports.scheduling import database as scheduling_db  # noqa: F401


UTC = timezone.utc


# --- Database Fixtures ---

@pytest.fixture
async def session_factory():
    """Async in-memory SQLite session factory with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def test_settings(tmp_path):
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None, output_dir=tmp_path / "outputs")


# --- Fake Collaborators ---

class FakeDataSource:
    """In-memory DataSource: returns canned records and remembers each query."""

    def __init__(self, records=None, error=None):
        self.records = records or {}
        self.error = error
        self.calls = []

    async def query(self, entity, *, gte, lte):
        self.calls.append((entity, gte, lte))
        if self.error is not None:
            raise self.error
        return list(self.records.get(entity, []))


@pytest.fixture
def fake_source():
    """Factory for FakeDataSource instances."""
    def _create(records=None, error=None):
        return FakeDataSource(records=records, error=error)
    return _create


@pytest.fixture
def failing_source():
    return FakeDataSource(error=QueryFailure("connection refused", entity="projects"))


# --- Mock Data Fixtures ---

@pytest.fixture
def sales_document():
    """Sales document with one completed and one open project."""
    return ReportDocument(
        id="doc-sales",
        name="Sales Report - 01/31/2024",
        type=ReportType.SALES,
        generated_at=datetime(2024, 1, 31, 17, 30, tzinfo=UTC),
        date_range_start=datetime(2024, 1, 1, tzinfo=UTC),
        date_range_end=datetime(2024, 1, 31, 23, 59, tzinfo=UTC),
        metrics=[
            Metric(name="Total Projects", value=2),
            Metric(name="Completed Projects", value=1),
            Metric(name="Total Revenue", value=1234567, format=MetricFormat.CURRENCY),
            Metric(name="Average Project Value", value=617284, format=MetricFormat.CURRENCY),
        ],
        detail=[
            {"id": 1, "name": "Kitchen Remodel", "created_at": "2024-01-05T10:00:00",
             "revenue": 1200000, "status": "completed"},
            {"id": 2, "name": "Roof & Gutters", "created_at": "2024-01-20T08:15:00",
             "revenue": 34567, "status": "open"},
        ],
    )


@pytest.fixture
def leads_document():
    """Leads document including a source distribution side table."""
    return ReportDocument(
        id="doc-leads",
        name="Leads Report - 01/31/2024",
        type=ReportType.LEADS,
        generated_at=datetime(2024, 1, 31, 9, 0, tzinfo=UTC),
        date_range_start=datetime(2024, 1, 1, tzinfo=UTC),
        date_range_end=datetime(2024, 1, 31, tzinfo=UTC),
        metrics=[
            Metric(name="Total Leads", value=3),
            Metric(name="Converted Leads", value=1),
            Metric(name="Conversion Rate", value=33, format=MetricFormat.PERCENT),
        ],
        detail=[
            {"id": 1, "name": "Ana", "email": "ana@example.com", "phone": "", "status": "converted",
             "source": "Website", "created_at": "2024-01-02T09:00:00"},
            {"id": 2, "name": "Ben", "email": "", "phone": "555-0100", "status": "new",
             "source": "Referral", "created_at": "2024-01-03T09:00:00"},
            {"id": 3, "name": "Cy", "email": "", "phone": "", "status": "new",
             "source": "Website", "created_at": "2024-01-04T09:00:00"},
        ],
        source_distribution=[
            SourceCount(source="Website", count=2),
            SourceCount(source="Referral", count=1),
        ],
    )
