"""
Core Module - Shared Infrastructure.
"""

from fieldreports.core.config import settings, Settings
from fieldreports.core.database import Base, get_db, get_async_db
from fieldreports.core.models import Frequency, ScheduleType, ReportType, OutputFormat, MetricFormat

__all__ = [
    "settings",
    "Settings",
    "Base",
    "get_db",
    "get_async_db",
    "Frequency",
    "ScheduleType",
    "ReportType",
    "OutputFormat",
    "MetricFormat",
]
