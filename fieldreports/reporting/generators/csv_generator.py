"""CSV report generator."""

import csv
import io

from fieldreports.reporting.models import ReportDocument
from .base import BaseGenerator


class CSVReportGenerator(BaseGenerator):
    """Generate two-section CSV exports (metrics, then detail) with raw values."""

    extension = "csv"
    mime_type = "text/csv; charset=utf-8"

    def generate(self, document: ReportDocument) -> bytes:
        """Generate CSV report."""
        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")

        # Header
        writer.writerow(["Report:", document.name])
        writer.writerow(["Generated:", self._raw(document.generated_at)])
        writer.writerow([])

        # Metrics
        writer.writerow(["Metrics:"])
        writer.writerow(["Name", "Value"])
        for metric in document.metrics:
            writer.writerow([metric.name, self._raw(metric.value)])
        writer.writerow([])

        # Detail
        writer.writerow([f"{document.detail_title}:"])
        writer.writerow([c.label for c in document.columns])
        writer.writerows(self._raw_detail_rows(document))

        if document.source_distribution is not None:
            writer.writerow([])
            writer.writerow(["Sources:"])
            writer.writerow(["Source", "Count"])
            for entry in document.source_distribution:
                writer.writerow([entry.source, entry.count])

        return output.getvalue().encode("utf-8")
