"""Main workflow orchestration.

Two entry points share the aggregator and renderer:

* ``generate_report``: on-demand export for a type, format and date range.
* ``run_schedule`` / ``process_due_schedules``: scheduled sends, invoked by
  an external trigger (cron running scripts/run_due_schedules.py, or the
  "run now" endpoint). Nothing here owns a timer.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import AsyncContextManager, Awaitable, Callable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from fieldreports.core.config import Settings, settings as default_settings
from fieldreports.core.exceptions import ReportingError, ScheduleConflict
from fieldreports.core.utils import utcnow
from fieldreports.reporting.aggregator import ReportAggregator
from fieldreports.reporting.datasource import DataSource
from fieldreports.reporting.models import RenderedReport
from fieldreports.reporting.renderer import DocumentRenderer
from fieldreports.scheduling.clock import previous_window_start
from fieldreports.scheduling.database import ReportScheduleRead
from fieldreports.scheduling.service import ScheduleService

logger = logging.getLogger(__name__)

DataSourceFactory = Callable[[], AsyncContextManager[DataSource]]
Deliver = Callable[[ReportScheduleRead, RenderedReport], Awaitable[None]]


async def generate_report(
    report_type: str,
    output_format: str,
    range_start: datetime,
    range_end: Optional[datetime] = None,
    *,
    data_source: DataSource,
    config: Optional[Settings] = None,
    clock: Callable[[], datetime] = utcnow,
) -> RenderedReport:
    """
    Generate one report and render it.

    Args:
        report_type: 'sales', 'leads' or 'activity'
        output_format: 'csv', 'html' or 'pdf'
        range_start: inclusive start of the reporting window
        range_end: inclusive end; defaults to now
        data_source: DataSource to read domain records from

    Returns:
        RenderedReport (bytes, filename, mime type)
    """
    config = config or default_settings
    aggregator = ReportAggregator(data_source, config=config, clock=clock)
    document = await aggregator.generate(report_type, range_start, range_end)
    rendered = DocumentRenderer(config).render(document, output_format)
    logger.info(f"Generated {rendered.filename} ({len(rendered.content)} bytes)")
    return rendered


def reporting_window(
    schedule: ReportScheduleRead,
    now: datetime,
    config: Optional[Settings] = None,
) -> Tuple[datetime, datetime]:
    """Window a scheduled send covers: since the last send, or one cadence step back."""
    start = schedule.last_sent or previous_window_start(schedule.frequency, now, config)
    return start, now


async def run_schedule(
    schedule: ReportScheduleRead,
    data_source: DataSource,
    store: ScheduleService,
    now: Optional[datetime] = None,
    config: Optional[Settings] = None,
) -> RenderedReport:
    """
    Generate a schedule's report and record the send.

    The send is recorded with a compare-and-swap against ``schedule``, so if
    another trigger already handled this slot ScheduleConflict is raised
    and the rendered bytes must be discarded rather than delivered.
    """
    config = config or default_settings
    now = now or utcnow()
    range_start, range_end = reporting_window(schedule, now, config)

    rendered = await generate_report(
        schedule.type,
        config.scheduled_format,
        range_start,
        range_end,
        data_source=data_source,
        config=config,
        clock=lambda: now,
    )
    await store.record_send(schedule, sent_at=now)
    return rendered


def _write_file(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)


async def write_to_outbox(
    schedule: ReportScheduleRead,
    rendered: RenderedReport,
    output_dir: Optional[Path] = None,
) -> Path:
    """Deliver by writing the file under <output_dir>/schedule_<id>/.

    The write runs in the default executor so the event loop is not blocked.
    """
    outbox = Path(output_dir or default_settings.output_dir) / f"schedule_{schedule.id}"
    path = outbox / rendered.filename
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, _write_file, path, rendered.content)
    logger.info(f"Wrote {path} for {', '.join(schedule.recipients)}")
    return path


async def process_due_schedules(
    store: ScheduleService,
    data_source_factory: DataSourceFactory,
    deliver: Deliver,
    now: Optional[datetime] = None,
    config: Optional[Settings] = None,
) -> List[int]:
    """
    Run every active schedule that is due at ``now``.

    Failures are logged per schedule and do not stop the loop.

    Returns:
        Ids of schedules whose report was delivered
    """
    now = now or utcnow()
    due = await store.due_schedules(now)
    logger.info(f"{len(due)} report schedule(s) due at {now.isoformat()}")

    processed = []
    for schedule in due:
        try:
            async with data_source_factory() as data_source:
                rendered = await run_schedule(schedule, data_source, store, now=now, config=config)
        except ScheduleConflict:
            logger.info(f"Schedule {schedule.id} already handled by another trigger, skipping")
            continue
        except (ReportingError, SQLAlchemyError) as e:
            logger.error(f"Scheduled report {schedule.id} ({schedule.name}) failed: {e}", exc_info=True)
            continue

        try:
            await deliver(schedule, rendered)
        except Exception as e:
            logger.error(f"Delivery of {rendered.filename} for schedule {schedule.id} failed: {e}", exc_info=True)
            continue

        processed.append(schedule.id)
        logger.info(f"Delivered {rendered.filename} to {len(schedule.recipients)} recipient(s)")

    return processed
