"""Output format generators."""

from .base import BaseGenerator, sanitize
from .csv_generator import CSVReportGenerator
from .html_generator import HTMLReportGenerator
from .pdf_generator import PDFReportGenerator

__all__ = [
    "BaseGenerator",
    "sanitize",
    "CSVReportGenerator",
    "HTMLReportGenerator",
    "PDFReportGenerator",
]
