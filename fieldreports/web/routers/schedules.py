"""Report schedules router: CRUD and manual "run now"."""

import logging

from fastapi import APIRouter, Depends

from fieldreports.core.exceptions import ReportingError
from fieldreports.core.schemas import CollectionResponse, StandardResponse
from fieldreports.reporting.datasource import DataSource
from fieldreports.reporting.workflow import run_schedule, write_to_outbox
from fieldreports.scheduling.database import (
    ReportScheduleCreate,
    ReportScheduleRead,
    ReportScheduleUpdate,
)
from fieldreports.scheduling.service import ScheduleService
from fieldreports.web.dependencies import get_data_source, get_schedule_service
from fieldreports.web.errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/reports/schedules",
    tags=["Report Schedules"]
)


@router.get("", response_model=CollectionResponse[ReportScheduleRead], summary="List Schedules")
async def list_schedules(
    active_only: bool = False,
    service: ScheduleService = Depends(get_schedule_service),
):
    schedules = await service.list_schedules(active_only=active_only)
    return CollectionResponse(data=schedules, total=len(schedules))


@router.get("/{schedule_id}", response_model=StandardResponse[ReportScheduleRead], summary="Get Schedule")
async def get_schedule(schedule_id: int, service: ScheduleService = Depends(get_schedule_service)):
    try:
        return StandardResponse(data=await service.get_schedule(schedule_id))
    except ReportingError as e:
        raise to_http_exception(e)


@router.post("", response_model=StandardResponse[ReportScheduleRead], summary="Create Schedule")
async def create_schedule(
    request: ReportScheduleCreate,
    service: ScheduleService = Depends(get_schedule_service),
):
    try:
        schedule = await service.create_schedule(request)
    except ReportingError as e:
        raise to_http_exception(e)
    return StandardResponse(data=schedule, message="Report schedule created")


@router.patch("/{schedule_id}", response_model=StandardResponse[ReportScheduleRead], summary="Update Schedule")
async def update_schedule(
    schedule_id: int,
    request: ReportScheduleUpdate,
    service: ScheduleService = Depends(get_schedule_service),
):
    try:
        schedule = await service.update_schedule(schedule_id, request)
    except ReportingError as e:
        raise to_http_exception(e)
    return StandardResponse(data=schedule, message="Report schedule updated")


@router.delete("/{schedule_id}", response_model=StandardResponse[ReportScheduleRead], summary="Delete Schedule")
async def delete_schedule(schedule_id: int, service: ScheduleService = Depends(get_schedule_service)):
    try:
        schedule = await service.delete_schedule(schedule_id)
    except ReportingError as e:
        raise to_http_exception(e)
    return StandardResponse(data=schedule, message="Report schedule deleted")


@router.post("/{schedule_id}/trigger", response_model=StandardResponse[ReportScheduleRead], summary="Run Schedule Now")
async def trigger_schedule(
    schedule_id: int,
    service: ScheduleService = Depends(get_schedule_service),
    data_source: DataSource = Depends(get_data_source),
):
    """
    Generate the schedule's report now and record the send.

    The report is written to the schedule's outbox, the same delivery the
    cron tick uses. 409 if a scheduler tick recorded the send first.
    """
    try:
        schedule = await service.get_schedule(schedule_id)
        rendered = await run_schedule(schedule, data_source, service, config=service.config)
        updated = await service.get_schedule(schedule_id)
    except ReportingError as e:
        logger.exception(f"Manual trigger of schedule {schedule_id} failed")
        raise to_http_exception(e)

    try:
        await write_to_outbox(updated, rendered, service.config.output_dir)
    except OSError as e:
        # Send is already recorded
        logger.error(f"Writing {rendered.filename} for schedule {schedule_id} failed: {e}", exc_info=True)
        return StandardResponse(
            data=updated,
            message=f"Report {rendered.filename} generated but could not be written: {e}",
        )

    logger.info(f"Report schedule {schedule_id} triggered manually")
    return StandardResponse(data=updated, message=f"Report {rendered.filename} generated")
