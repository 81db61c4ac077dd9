"""Shared dependencies for the API routers."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fieldreports.core.database import async_session_factory, get_db
from fieldreports.reporting.datasource import DataSource, SqlDataSource
from fieldreports.scheduling.service import ScheduleService


def get_schedule_service() -> ScheduleService:
    return ScheduleService(async_session_factory)


def get_data_source(session: AsyncSession = Depends(get_db)) -> DataSource:
    return SqlDataSource(session)
