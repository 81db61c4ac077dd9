"""Report aggregation: domain records -> ReportDocument.

Each report type is one ``ReportArm``: which entity to read, which
timestamp bounds it, how a record becomes a detail row, and which metrics
the rows reduce to. Arms are registered in ``ARMS``; the aggregator never
branches on type itself.
"""
import logging
import uuid
from abc import ABC, abstractmethod
from collections import Counter
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from fieldreports.core.config import Settings, settings as default_settings
from fieldreports.core.exceptions import QueryFailure, UnknownReportType, ValidationFailure
from fieldreports.core.models import MetricFormat, ReportType
from fieldreports.core.utils import ensure_utc, round_half_up, utcnow
from fieldreports.reporting.datasource import DataSource
from fieldreports.reporting.models import Metric, ReportDocument, SourceCount, columns_for

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class ReportArm(ABC):
    """Aggregation rules for one report type."""

    report_type: ReportType
    entity: str
    timestamp_field: str
    # Column -> value used when the record's value is missing or falsy
    defaults: Dict[str, Any] = {}

    def build_row(self, record: Dict[str, Any]) -> Row:
        row = {column.key: record.get(column.key) for column in columns_for(self.report_type)}
        for key, default in self.defaults.items():
            row[key] = record.get(key) or default
        return row

    @abstractmethod
    def metrics(self, rows: List[Row]) -> List[Metric]:
        pass

    def extras(self, rows: List[Row]) -> Dict[str, Any]:
        """Auxiliary document fields beyond metrics and detail."""
        return {}


class SalesArm(ReportArm):
    report_type = ReportType.SALES
    entity = "projects"
    timestamp_field = "created_at"
    defaults = {"revenue": 0}

    def metrics(self, rows):
        total = len(rows)
        completed = sum(1 for r in rows if r["status"] == "completed")
        revenue = sum(r["revenue"] for r in rows)
        average = round_half_up(revenue / total) if total > 0 else 0
        return [
            Metric(name="Total Projects", value=total),
            Metric(name="Completed Projects", value=completed),
            Metric(name="Total Revenue", value=revenue, format=MetricFormat.CURRENCY),
            Metric(name="Average Project Value", value=average, format=MetricFormat.CURRENCY),
        ]


class LeadsArm(ReportArm):
    report_type = ReportType.LEADS
    entity = "leads"
    timestamp_field = "created_at"
    defaults = {"email": "", "phone": "", "source": "Unknown"}

    def metrics(self, rows):
        total = len(rows)
        converted = sum(1 for r in rows if r["status"] == "converted")
        rate = round_half_up(converted / total * 100) if total > 0 else 0
        return [
            Metric(name="Total Leads", value=total),
            Metric(name="Converted Leads", value=converted),
            Metric(name="Conversion Rate", value=rate, format=MetricFormat.PERCENT),
        ]

    def extras(self, rows):
        # Counter keeps first-seen order
        counts = Counter(r["source"] for r in rows)
        return {
            "source_distribution": [
                SourceCount(source=source, count=count) for source, count in counts.items()
            ]
        }


class ActivityArm(ReportArm):
    report_type = ReportType.ACTIVITY
    entity = "visits"
    timestamp_field = "scheduled_date"
    defaults = {"duration_minutes": 0}

    def metrics(self, rows):
        total = len(rows)
        completed = sum(1 for r in rows if r["status"] == "completed")
        if total > 0:
            completion = f"{round_half_up(completed / total * 100)}%"
        else:
            completion = "0%"
        avg_duration = round_half_up(sum(r["duration_minutes"] for r in rows) / max(total, 1))
        return [
            Metric(name="Total Visits", value=total),
            Metric(name="Completed Visits", value=completed),
            Metric(name="Completion Rate", value=completion),
            Metric(name="Average Duration", value=f"{avg_duration} minutes"),
        ]


ARMS: Dict[ReportType, ReportArm] = {
    arm.report_type: arm for arm in (SalesArm(), LeadsArm(), ActivityArm())
}

FALLBACK_TYPE = ReportType.ACTIVITY


class ReportAggregator:
    """
    Builds ReportDocuments from a DataSource.

    Stateless apart from its injected collaborators, so one instance can
    serve concurrent generate() calls.
    """

    def __init__(
        self,
        data_source: DataSource,
        config: Optional[Settings] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.data_source = data_source
        self.config = config or default_settings
        self.clock = clock

    def resolve(self, report_type) -> ReportArm:
        """Arm for ``report_type``; unknown types fall back to activity."""
        try:
            return ARMS[ReportType(report_type)]
        except ValueError:
            if self.config.strict_enums:
                raise UnknownReportType(report_type)
            logger.warning(f"Unknown report type {report_type!r}, falling back to {FALLBACK_TYPE.value}")
            return ARMS[FALLBACK_TYPE]

    async def generate(
        self,
        report_type,
        range_start: datetime,
        range_end: Optional[datetime] = None,
    ) -> ReportDocument:
        """
        Read one entity over ``[range_start, range_end]`` and reduce it.

        Args:
            report_type: 'sales', 'leads' or 'activity'
            range_start: inclusive lower bound on the arm's timestamp field
            range_end: inclusive upper bound; defaults to generation time

        Naive bounds are taken as UTC.

        Returns:
            ReportDocument

        Raises:
            QueryFailure: the data source read failed
            ValidationFailure: range_start is after range_end
        """
        arm = self.resolve(report_type)
        generated_at = self.clock()
        range_start = ensure_utc(range_start)
        range_end = ensure_utc(range_end or generated_at)
        if range_start > range_end:
            raise ValidationFailure("date_range_start must not be after date_range_end")

        try:
            records = await self.data_source.query(
                arm.entity,
                gte=(arm.timestamp_field, range_start),
                lte=(arm.timestamp_field, range_end),
            )
        except QueryFailure:
            raise
        except Exception as e:
            raise QueryFailure(f"Reading {arm.entity} failed: {e}", entity=arm.entity) from e

        rows = [arm.build_row(record) for record in records]
        logger.info(f"Aggregated {len(rows)} {arm.entity} into a {arm.report_type.value} report")

        return ReportDocument(
            id=uuid.uuid4().hex,
            name=f"{arm.report_type.value.capitalize()} Report - {generated_at.strftime(self.config.date_format)}",
            type=arm.report_type,
            generated_at=generated_at,
            date_range_start=range_start,
            date_range_end=range_end,
            metrics=arm.metrics(rows),
            detail=rows,
            **arm.extras(rows),
        )
