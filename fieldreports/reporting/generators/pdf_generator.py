"""PDF report generator using ReportLab."""

import io
from functools import partial
from typing import List
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from fieldreports.reporting.models import ReportDocument
from .base import BaseGenerator

CONTENT_WIDTH = A4[0] - 28 * mm

TEAL = colors.Color(22 / 255, 160 / 255, 133 / 255)
LIGHT_GREY = colors.Color(245 / 255, 245 / 255, 245 / 255)


class FooterCanvas(canvas.Canvas):
    """Canvas that defers page output so the footer can show "Page i of N"."""

    def __init__(self, *args, attribution: str = "", **kwargs):
        super().__init__(*args, **kwargs)
        self._attribution = attribution
        self._saved_page_states = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        page_count = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(page_count)
            super().showPage()
        super().save()

    def _draw_footer(self, page_count: int):
        width, _ = self._pagesize
        self.saveState()
        self.setFont("Helvetica", 8)
        self.setFillColor(colors.grey)
        self.drawString(14 * mm, 10 * mm, self._attribution)
        self.drawRightString(width - 14 * mm, 10 * mm, f"Page {self._pageNumber} of {page_count}")
        self.restoreState()


class PDFReportGenerator(BaseGenerator):
    """Generate printable PDF reports.

    Unlike CSV/HTML, numbers carry thousands separators and currency or
    percent decoration according to each metric's format hint and each
    detail column's kind.
    """

    extension = "pdf"
    mime_type = "application/pdf"

    def generate(self, document: ReportDocument) -> bytes:
        """Generate PDF report."""
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=14 * mm,
            rightMargin=14 * mm,
            topMargin=14 * mm,
            bottomMargin=20 * mm,
            title=document.name,
            author=self.config.pdf_attribution,
            invariant=1,
            pageCompression=0,
        )
        doc.build(
            self._build_story(document),
            canvasmaker=partial(FooterCanvas, attribution=self.config.pdf_attribution),
        )
        return buffer.getvalue()

    def metric_rows(self, document: ReportDocument) -> List[List[str]]:
        """Metrics table body as printed."""
        return [[m.name, self._format_metric(m)] for m in document.metrics]

    def detail_rows(self, document: ReportDocument) -> List[List[str]]:
        """Detail table body as printed."""
        return [
            [self._format_cell(c, record.get(c.key)) for c in document.columns]
            for record in document.detail
        ]

    def _build_story(self, document: ReportDocument) -> list:
        styles = getSampleStyleSheet()
        banner_style = ParagraphStyle(
            "Banner", parent=styles["Title"], textColor=colors.white, fontSize=18, leading=22
        )
        section_style = ParagraphStyle(
            "Section", parent=styles["Heading2"], textColor=TEAL, spaceBefore=6
        )
        info_style = ParagraphStyle("Info", parent=styles["Normal"], fontSize=10)

        banner = Table([[Paragraph(escape(document.name), banner_style)]], colWidths=[CONTENT_WIDTH])
        banner.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, -1), TEAL),
            ("TOPPADDING", (0, 0), (-1, -1), 8),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
        ]))

        info = Table(
            [
                [Paragraph(escape(f"Generated: {self._format_datetime(document.generated_at)}"), info_style)],
                [Paragraph(escape(self._date_range_label(document)), info_style)],
            ],
            colWidths=[CONTENT_WIDTH],
        )
        info.setStyle(TableStyle([("BACKGROUND", (0, 0), (-1, -1), LIGHT_GREY)]))

        story = [
            banner,
            Spacer(1, 6 * mm),
            info,
            Spacer(1, 6 * mm),
            Paragraph("Key Metrics", section_style),
            self._table([["Metric", "Value"]] + self.metric_rows(document), font_size=10),
            Spacer(1, 6 * mm),
            Paragraph(escape(f"{document.detail_title} Overview"), section_style),
            self._table(
                [[c.label for c in document.columns]] + self.detail_rows(document),
                font_size=8,
            ),
        ]

        if document.source_distribution is not None:
            story += [
                Spacer(1, 6 * mm),
                Paragraph("Lead Sources", section_style),
                self._table(
                    [["Source", "Count"]]
                    + [[s.source, self._format_number(s.count)] for s in document.source_distribution],
                    font_size=10,
                ),
            ]
        return story

    def _table(self, data: List[List[str]], font_size: int) -> Table:
        table = Table(data, repeatRows=1, hAlign="LEFT")
        commands = [
            ("BACKGROUND", (0, 0), (-1, 0), TEAL),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), font_size),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.lightgrey),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ]
        if len(data) > 1:
            commands.append(("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, LIGHT_GREY]))
        table.setStyle(TableStyle(commands))
        return table
