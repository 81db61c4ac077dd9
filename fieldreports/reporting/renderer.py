"""DocumentRenderer: one ReportDocument in, one file out."""

import logging
from typing import Dict, Optional, Type

from fieldreports.core.config import Settings, settings as default_settings
from fieldreports.core.exceptions import RenderFailure
from fieldreports.core.models import OutputFormat
from fieldreports.reporting.generators import (
    BaseGenerator,
    CSVReportGenerator,
    HTMLReportGenerator,
    PDFReportGenerator,
)
from fieldreports.reporting.models import RenderedReport, ReportDocument

logger = logging.getLogger(__name__)

GENERATORS: Dict[OutputFormat, Type[BaseGenerator]] = {
    OutputFormat.CSV: CSVReportGenerator,
    OutputFormat.HTML: HTMLReportGenerator,
    OutputFormat.PDF: PDFReportGenerator,
}


class DocumentRenderer:
    """Dispatches a document to the generator for the requested format."""

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings

    def generator_for(self, fmt) -> BaseGenerator:
        if isinstance(fmt, str) and not isinstance(fmt, OutputFormat):
            fmt = fmt.lower()
        try:
            output_format = OutputFormat(fmt)
        except ValueError:
            raise RenderFailure(f"Unsupported output format: {fmt!r}", format=str(fmt))
        return GENERATORS[output_format](self.config)

    def render(self, document: ReportDocument, fmt) -> RenderedReport:
        """
        Render ``document`` as csv, html or pdf.

        Raises:
            RenderFailure: unsupported format, or the document could not be serialized
        """
        generator = self.generator_for(fmt)
        try:
            content = generator.generate(document)
        except RenderFailure as e:
            e.format = generator.extension
            raise
        except Exception as e:
            logger.error(f"Rendering {document.name!r} as {generator.extension} failed: {e}")
            raise RenderFailure(
                f"Rendering {generator.extension} failed: {e}", format=generator.extension
            ) from e

        return RenderedReport(
            content=content,
            filename=generator._get_filename(document),
            mime_type=generator.mime_type,
        )
