"""
Database models and API schemas for report schedules.

A schedule says which report goes to whom and when. ``next_send`` is
always derived from ``frequency`` + ``delivery_time`` by the clock module,
never written directly by callers.
"""
from datetime import datetime, time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import Boolean, DateTime, Integer, JSON, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from fieldreports.core.database import Base
from fieldreports.core.models import Frequency, ScheduleType
from fieldreports.core.utils import ensure_utc


class ReportSchedule(Base):
    """Persisted configuration describing when and to whom a report is sent."""
    __tablename__ = "report_schedules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    frequency: Mapped[str] = mapped_column(String(10), nullable=False)
    delivery_time: Mapped[time] = mapped_column(Time, nullable=False)
    recipients: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    last_sent: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    next_send: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    pdf_template: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self):
        return f"<ReportSchedule(id={self.id}, name='{self.name}', frequency='{self.frequency}')>"


# --- Schemas ---

def _clean_recipients(v: List[str]) -> List[str]:
    cleaned = []
    for address in v:
        address = address.strip()
        if not address or "@" not in address:
            raise ValueError(f"invalid recipient address: {address!r}")
        if address not in cleaned:
            cleaned.append(address)
    return cleaned


class ReportScheduleCreate(BaseModel):
    """Payload for creating a schedule."""
    name: str = Field(..., min_length=1, max_length=255)
    type: ScheduleType
    frequency: Frequency
    delivery_time: Optional[time] = Field(None, description="Time of day; defaults to 09:00:00")
    recipients: List[str] = Field(..., min_length=1)
    is_active: bool = True
    pdf_template: Optional[str] = None

    @field_validator('recipients')
    @classmethod
    def validate_recipients(cls, v):
        cleaned = _clean_recipients(v)
        if not cleaned:
            raise ValueError("at least one recipient is required")
        return cleaned


class ReportScheduleUpdate(BaseModel):
    """Partial update; only fields that are set are written."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[ScheduleType] = None
    frequency: Optional[Frequency] = None
    delivery_time: Optional[time] = None
    recipients: Optional[List[str]] = None
    is_active: Optional[bool] = None
    pdf_template: Optional[str] = None

    @field_validator('recipients')
    @classmethod
    def validate_recipients(cls, v):
        if v is None:
            return v
        cleaned = _clean_recipients(v)
        if not cleaned:
            raise ValueError("recipients cannot be emptied")
        return cleaned


class ReportScheduleRead(BaseModel):
    """Schedule as returned to callers."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: str
    frequency: str
    delivery_time: time
    recipients: List[str]
    is_active: bool
    last_sent: Optional[datetime] = None
    next_send: datetime
    pdf_template: Optional[str] = None

    @field_validator('last_sent', 'next_send')
    @classmethod
    def attach_utc(cls, v):
        return ensure_utc(v)
