"""Base generator class."""

import re
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, List, Optional

from dateutil import parser as date_parser

from fieldreports.core.config import Settings, settings as default_settings
from fieldreports.core.exceptions import RenderFailure
from fieldreports.core.models import MetricFormat
from fieldreports.core.utils import plain_number
from fieldreports.reporting.models import Column, Metric, ReportDocument

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9]")


def sanitize(name: str) -> str:
    """Replace every character outside [A-Za-z0-9] with an underscore."""
    return _UNSAFE_FILENAME_CHARS.sub("_", name)


class BaseGenerator(ABC):
    """Base class for report generators.

    Generators are pure: the same document always yields the same bytes.
    Anything time-dependent comes from the document, never the wall clock.
    """

    extension: str
    mime_type: str

    def __init__(self, config: Optional[Settings] = None):
        """Initialize generator."""
        self.config = config or default_settings

    @abstractmethod
    def generate(self, document: ReportDocument) -> bytes:
        """
        Render a report document.

        Args:
            document: ReportDocument to render

        Returns:
            Encoded file content
        """
        pass

    def _get_filename(self, document: ReportDocument) -> str:
        return f"{sanitize(document.name)}.{self.extension}"

    # --- Raw values (CSV, HTML metrics) ---

    def _raw(self, value: Any) -> str:
        """Value as stored in the document, without locale formatting."""
        if value is None:
            return ""
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        if isinstance(value, bool):
            return str(value).lower()
        if isinstance(value, (int, float)):
            return str(plain_number(value))
        if isinstance(value, str):
            return value
        raise RenderFailure(f"Cannot serialize value of type {type(value).__name__}")

    # --- Locale-formatted values (HTML detail dates, PDF) ---

    def _to_datetime(self, value: Any) -> Optional[datetime]:
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        if isinstance(value, str):
            try:
                return date_parser.isoparse(value)
            except ValueError as e:
                raise RenderFailure(f"Unparseable date value: {value!r}") from e
        raise RenderFailure(f"Unsupported date value: {value!r}")

    def _format_date(self, value: Any) -> str:
        parsed = self._to_datetime(value)
        return parsed.strftime(self.config.date_format) if parsed else ""

    def _format_datetime(self, value: Any) -> str:
        parsed = self._to_datetime(value)
        return parsed.strftime(self.config.datetime_format) if parsed else ""

    def _format_number(self, value: Any) -> str:
        """Thousands separators; non-numeric values pass through unchanged."""
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return self._raw(value)
        value = plain_number(value)
        if isinstance(value, float):
            return f"{value:,.2f}"
        return f"{value:,}"

    def _format_currency(self, value: Any) -> str:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return self._raw(value)
        return f"{self.config.currency_symbol}{self._format_number(value)}"

    def _format_metric(self, metric: Metric) -> str:
        """Metric value with its format hint applied."""
        if metric.format == MetricFormat.CURRENCY:
            return self._format_currency(metric.value)
        if metric.format == MetricFormat.PERCENT and isinstance(metric.value, (int, float)):
            return f"{self._format_number(metric.value)}%"
        return self._format_number(metric.value)

    def _format_cell(self, column: Column, value: Any) -> str:
        """Detail cell with its column kind applied."""
        if column.kind == "date":
            return self._format_date(value)
        if column.kind == "currency":
            return self._format_currency(value)
        if column.kind == "number":
            return self._format_number(value)
        return self._raw(value)

    # --- Shared table builders ---

    def _raw_detail_rows(self, document: ReportDocument) -> List[List[str]]:
        return [[self._raw(row.get(c.key)) for c in document.columns] for row in document.detail]

    def _date_range_label(self, document: ReportDocument) -> str:
        return (
            f"Date Range: {self._format_date(document.date_range_start)} "
            f"to {self._format_date(document.date_range_end)}"
        )
