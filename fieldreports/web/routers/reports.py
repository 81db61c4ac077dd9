"""Reports router: on-demand generation and download."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from fieldreports.core.exceptions import ReportingError
from fieldreports.core.models import OutputFormat
from fieldreports.reporting.datasource import DataSource
from fieldreports.reporting.models import RenderedReport
from fieldreports.reporting.workflow import generate_report
from fieldreports.web.dependencies import get_data_source
from fieldreports.web.errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/reports",
    tags=["Reporting"]
)


# --- Schemas ---

class GenerateReportRequest(BaseModel):
    type: str = Field("activity", description="sales, leads or activity")
    format: OutputFormat = OutputFormat.PDF
    date_range_start: datetime
    date_range_end: Optional[datetime] = None


def file_response(rendered: RenderedReport) -> Response:
    return Response(
        content=rendered.content,
        media_type=rendered.mime_type,
        headers={"Content-Disposition": f"attachment; filename={rendered.filename}"},
    )


# --- Endpoints ---

@router.post("/generate", summary="Generate Report")
async def generate_instant_report(
    request: GenerateReportRequest,
    data_source: DataSource = Depends(get_data_source),
):
    """Generate a report for immediate download."""
    try:
        rendered = await generate_report(
            request.type,
            request.format,
            request.date_range_start,
            request.date_range_end,
            data_source=data_source,
        )
    except ReportingError as e:
        logger.exception("Report generation error")
        raise to_http_exception(e)
    return file_response(rendered)
