"""Canonical, format-independent report document.

The aggregator builds a ReportDocument once; every renderer reads the same
metrics (in order) and the same detail columns (in order) from it. The
column registry below is the single definition of each report type's
detail table.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from fieldreports.core.models import MetricFormat, ReportType


@dataclass(frozen=True)
class Column:
    """One detail-table column.

    ``kind`` drives presentation only: 'date' columns are locale-formatted
    in HTML/PDF, 'currency' and 'number' columns get separators in PDF.
    """
    key: str
    label: str
    kind: str = "text"


DETAIL_COLUMNS: Dict[ReportType, Tuple[Column, ...]] = {
    ReportType.SALES: (
        Column("id", "ID"),
        Column("name", "Name"),
        Column("created_at", "Created", "date"),
        Column("revenue", "Revenue", "currency"),
        Column("status", "Status"),
    ),
    ReportType.LEADS: (
        Column("id", "ID"),
        Column("name", "Name"),
        Column("email", "Email"),
        Column("phone", "Phone"),
        Column("status", "Status"),
        Column("source", "Source"),
        Column("created_at", "Created", "date"),
    ),
    ReportType.ACTIVITY: (
        Column("id", "ID"),
        Column("project_id", "Project ID"),
        Column("user_id", "User ID"),
        Column("visit_type", "Type"),
        Column("status", "Status"),
        Column("scheduled_date", "Scheduled", "date"),
        Column("duration_minutes", "Duration (min)", "number"),
    ),
}

DETAIL_TITLES: Dict[ReportType, str] = {
    ReportType.SALES: "Projects",
    ReportType.LEADS: "Leads",
    ReportType.ACTIVITY: "Visits",
}


def columns_for(report_type: ReportType) -> Tuple[Column, ...]:
    return DETAIL_COLUMNS[ReportType(report_type)]


class Metric(BaseModel):
    """A named scalar with an optional formatting hint."""
    model_config = ConfigDict(frozen=True)

    name: str
    value: Union[int, float, str]
    format: Optional[MetricFormat] = None


class SourceCount(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    count: int


class ReportDocument(BaseModel):
    """One generated report. Produced by the aggregator, consumed by renderers."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    type: ReportType
    generated_at: datetime
    date_range_start: datetime
    date_range_end: datetime
    metrics: List[Metric] = Field(default_factory=list)
    detail: List[Dict[str, Any]] = Field(default_factory=list)
    source_distribution: Optional[List[SourceCount]] = None

    @property
    def columns(self) -> Tuple[Column, ...]:
        return columns_for(self.type)

    @property
    def detail_title(self) -> str:
        return DETAIL_TITLES[self.type]

    def metric(self, name: str) -> Metric:
        for m in self.metrics:
            if m.name == name:
                return m
        raise KeyError(name)


@dataclass(frozen=True)
class RenderedReport:
    """Output of DocumentRenderer: bytes plus what transport needs to ship them."""
    content: bytes
    filename: str
    mime_type: str
