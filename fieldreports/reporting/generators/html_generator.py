"""HTML report generator."""

from html import escape
from typing import Iterable, List

from fieldreports.reporting.models import ReportDocument
from .base import BaseGenerator


class HTMLReportGenerator(BaseGenerator):
    """Generate self-contained HTML reports.

    Metric values are printed raw, exactly as the CSV export prints them.
    Date columns in the detail table are locale-formatted.
    """

    extension = "html"
    mime_type = "text/html; charset=utf-8"

    def generate(self, document: ReportDocument) -> bytes:
        """Generate HTML report."""
        return self._generate_html(document).encode("utf-8")

    def _table(self, headers: Iterable[str], rows: Iterable[Iterable[str]], css_class: str) -> str:
        head_html = "".join(f"<th>{escape(h)}</th>" for h in headers)
        rows_html = ""
        for row in rows:
            cells = "".join(f"<td>{escape(cell)}</td>" for cell in row)
            rows_html += f"""
                    <tr>{cells}</tr>"""
        return f"""
            <table class="{css_class}">
                <thead>
                    <tr>{head_html}</tr>
                </thead>
                <tbody>{rows_html}
                </tbody>
            </table>"""

    def _detail_rows(self, document: ReportDocument) -> List[List[str]]:
        rows = []
        for record in document.detail:
            rows.append([
                self._format_date(record.get(c.key)) if c.kind == "date" else self._raw(record.get(c.key))
                for c in document.columns
            ])
        return rows

    def _generate_html(self, document: ReportDocument) -> str:
        """Generate complete HTML document."""
        metrics_table = self._table(
            ["Name", "Value"],
            [[m.name, self._raw(m.value)] for m in document.metrics],
            "metrics",
        )
        detail_table = self._table(
            [c.label for c in document.columns],
            self._detail_rows(document),
            "detail",
        )

        sources_section = ""
        if document.source_distribution is not None:
            sources_table = self._table(
                ["Source", "Count"],
                [[s.source, str(s.count)] for s in document.source_distribution],
                "sources",
            )
            sources_section = f"""
        <h2>Sources</h2>{sources_table}"""

        title = escape(document.name)
        html = f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{title}</title>
    <style>
        body {{
            font-family: Arial, sans-serif;
            color: #1a202c;
            margin: 2rem;
        }}

        h1 {{
            color: #16a085;
        }}

        .subtitle {{
            color: #718096;
        }}

        table {{
            border-collapse: collapse;
            width: 100%;
            margin-bottom: 2rem;
        }}

        th, td {{
            border: 1px solid #ddd;
            padding: 8px;
            text-align: left;
        }}

        th {{
            background-color: #f2f2f2;
        }}
    </style>
</head>
<body>
    <h1>{title}</h1>
    <p class="subtitle">Generated: {escape(self._format_datetime(document.generated_at))}</p>
    <p class="subtitle">{escape(self._date_range_label(document))}</p>

    <h2>Metrics</h2>{metrics_table}

    <h2>{escape(document.detail_title)}</h2>{detail_table}
{sources_section}
</body>
</html>
"""
        return html
