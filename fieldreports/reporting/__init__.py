"""
Reporting Module - Report Aggregation and Multi-format Export.
"""

from fieldreports.reporting.aggregator import ReportAggregator
from fieldreports.reporting.models import Metric, RenderedReport, ReportDocument
from fieldreports.reporting.renderer import DocumentRenderer
from fieldreports.reporting.workflow import generate_report, process_due_schedules, run_schedule, write_to_outbox

__all__ = [
    "ReportAggregator",
    "DocumentRenderer",
    "ReportDocument",
    "Metric",
    "RenderedReport",
    "generate_report",
    "run_schedule",
    "process_due_schedules",
    "write_to_outbox",
]
