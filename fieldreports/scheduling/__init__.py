"""
Scheduling Module - Recurring Report Send Times.
"""

from fieldreports.scheduling.clock import next_send, next_send_from_anchor
from fieldreports.scheduling.service import ScheduleService

__all__ = [
    "next_send",
    "next_send_from_anchor",
    "ScheduleService",
]
