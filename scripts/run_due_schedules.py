"""
Run Due Report Schedules.
One scheduler tick: generate every due schedule's report and write it to the outbox.
Meant to be invoked by cron (e.g. every 15 minutes).
"""
import asyncio
import logging
import sys

from fieldreports.core.config import settings
from fieldreports.core.database import engine
from fieldreports.reporting.datasource import sql_data_source
from fieldreports.reporting.workflow import process_due_schedules, write_to_outbox
from fieldreports.scheduling.service import ScheduleService

logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def main() -> int:
    try:
        processed = await process_due_schedules(ScheduleService(), sql_data_source, write_to_outbox)
    finally:
        await engine.dispose()
    logger.info(f"Tick complete: {len(processed)} report(s) delivered")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(1)
