"""
Core enums for the reporting system.

NOTE: These are NOT database models. For SQLAlchemy ORM models, see each module's database.py:
  - ReportSchedule → fieldreports/scheduling/database.py
  - Project/Lead/Visit (read models) → fieldreports/reporting/database.py

The enums below are shared by the scheduling and reporting modules so that
database columns, API payloads and aggregation dispatch agree on values.
"""
from enum import Enum


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ScheduleType(str, Enum):
    """Report types a schedule can be configured with."""
    SALES = "sales"
    ACTIVITY = "activity"
    ANALYTICS = "analytics"
    SYSTEM = "system"
    FEEDBACK = "feedback"


class ReportType(str, Enum):
    """Report types that have an aggregation arm."""
    SALES = "sales"
    LEADS = "leads"
    ACTIVITY = "activity"


class OutputFormat(str, Enum):
    CSV = "csv"
    HTML = "html"
    PDF = "pdf"


class MetricFormat(str, Enum):
    CURRENCY = "currency"
    PERCENT = "percent"
    PLAIN = "plain"
