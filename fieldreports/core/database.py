# ──── Usage Guide ────
# MODULE CODE (fieldreports/*/workflow.py, fieldreports/*/service.py):
#   Take an async_sessionmaker as a constructor argument; default to async_session_factory.
#   Pattern: async with get_async_db() as session:
#                result = await session.execute(select(Model).where(...))
#
# WEB (fieldreports/web/routers/*):
#   Depend on get_db for a request-scoped session.

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from fieldreports.core.config import settings


class ToDictMixin:
    """Mixin to add dictionary serialization to models."""
    def to_dict(self):
        """Convert model instance to dictionary."""
        from sqlalchemy import inspect
        import datetime
        from decimal import Decimal
        from enum import Enum

        result = {}
        for key in inspect(self).mapper.column_attrs.keys():
            value = getattr(self, key)
            if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
                result[key] = value.isoformat()
            elif isinstance(value, Decimal):
                result[key] = float(value)
            elif isinstance(value, Enum):
                result[key] = value.value
            else:
                result[key] = value
        return result


class Base(ToDictMixin, DeclarativeBase):
    metadata = MetaData()


# ──── Single Async Engine ────
engine = create_async_engine(settings.async_database_url, echo=False, future=True)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


# ──── Session Providers (FastAPI Dependencies) ────
async def get_db() -> AsyncIterator[AsyncSession]:
    async with async_session_factory() as session:
        yield session


# ──── Context Managers ────
@asynccontextmanager
async def get_async_db(factory: async_sessionmaker = None) -> AsyncIterator[AsyncSession]:
    async with (factory or async_session_factory)() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# ──── End of Database Configuration ────
