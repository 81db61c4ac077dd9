"""Errors raised by the scheduling and reporting modules.

Everything derives from ``ReportingError`` so the web layer and the
scheduled-run loop can catch the whole family in one place.
"""
from typing import Optional


class ReportingError(Exception):
    """Base class for scheduling and reporting errors."""


class ValidationFailure(ReportingError):
    """Malformed schedule input (bad delivery time, empty recipients, ...)."""


class InvalidFrequency(ValidationFailure):
    """Frequency outside daily/weekly/monthly while strict_enums is on."""

    def __init__(self, frequency):
        self.frequency = frequency
        super().__init__(f"Unsupported frequency: {frequency!r}")


class UnknownReportType(ValidationFailure):
    """Report type without an aggregation arm while strict_enums is on."""

    def __init__(self, report_type):
        self.report_type = report_type
        super().__init__(f"Unsupported report type: {report_type!r}")


class QueryFailure(ReportingError):
    """A DataSource read failed. Never retried inside the core."""

    def __init__(self, message: str, entity: Optional[str] = None):
        self.entity = entity
        super().__init__(message)


class RenderFailure(ReportingError):
    """A ReportDocument could not be serialized to the requested format."""

    def __init__(self, message: str, format: Optional[str] = None):
        self.format = format
        super().__init__(message)


class ScheduleNotFound(ReportingError):
    def __init__(self, schedule_id: int):
        self.schedule_id = schedule_id
        super().__init__(f"Report schedule {schedule_id} not found")


class ScheduleConflict(ReportingError):
    """The schedule row changed between read and update (lost compare-and-swap)."""

    def __init__(self, schedule_id: int):
        self.schedule_id = schedule_id
        super().__init__(f"Report schedule {schedule_id} was updated concurrently")
