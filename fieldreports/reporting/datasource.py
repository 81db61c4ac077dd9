"""DataSource collaborator: read-only, date-bounded domain queries.

The aggregator only sees the ``DataSource`` protocol. ``SqlDataSource`` is
the production adapter over the read models in ``reporting.database``;
tests substitute an in-memory fake.
"""
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Protocol, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fieldreports.core.database import get_async_db
from fieldreports.core.exceptions import QueryFailure
from fieldreports.reporting.database import ENTITY_MODELS

logger = logging.getLogger(__name__)

Bound = Tuple[str, Any]


class DataSource(Protocol):
    async def query(self, entity: str, *, gte: Bound, lte: Bound) -> List[Dict[str, Any]]:
        """
        Records of ``entity`` with ``gte[0] >= gte[1]`` and ``lte[0] <= lte[1]``.

        Raises:
            QueryFailure: the read failed
        """
        ...


class SqlDataSource:
    """DataSource over an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def query(self, entity: str, *, gte: Bound, lte: Bound) -> List[Dict[str, Any]]:
        model = ENTITY_MODELS.get(entity)
        if model is None:
            raise QueryFailure(f"Unknown entity: {entity}", entity=entity)

        columns = model.__table__.c
        for field, _ in (gte, lte):
            if field not in columns:
                raise QueryFailure(f"Unknown field {field!r} on {entity}", entity=entity)

        stmt = (
            select(model)
            .where(columns[gte[0]] >= gte[1])
            .where(columns[lte[0]] <= lte[1])
            .order_by(columns[gte[0]], model.id)
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Query on {entity} failed: {e}")
            raise QueryFailure(f"Query on {entity} failed: {e}", entity=entity) from e

        return [row.to_dict() for row in result.scalars().all()]


@asynccontextmanager
async def sql_data_source(session_factory: Optional[async_sessionmaker] = None) -> AsyncIterator[SqlDataSource]:
    """SqlDataSource over a fresh session; the session closes on exit."""
    async with get_async_db(session_factory) as session:
        yield SqlDataSource(session)
