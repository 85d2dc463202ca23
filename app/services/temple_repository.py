"""
Temple Repository - the persistence collaborator for the registry.

Thin predicate-based access over an AsyncSession. SQLAlchemy failures are
translated into registry errors here so callers only see TempleError.
"""

import logging
import uuid
from typing import Any, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.exceptions import Conflict, InvalidInput, UpstreamFailure
from app.models.temple import Temple

logger = logging.getLogger(__name__)


def parse_temple_id(temple_id: Any) -> uuid.UUID:
    """Validate an id coming from a caller."""
    if isinstance(temple_id, uuid.UUID):
        return temple_id
    try:
        return uuid.UUID(str(temple_id))
    except (TypeError, ValueError):
        raise InvalidInput("Valid Temple ID is required", field="templeId")


class TempleRepository:
    """Find/count/create/save for temples."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, temple_id: uuid.UUID) -> Optional[Temple]:
        try:
            return await self.db.get(Temple, temple_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load temple {temple_id}: {e}", exc_info=True)
            raise UpstreamFailure("Failed to load temple") from e

    async def find_one(self, *criteria) -> Optional[Temple]:
        try:
            result = await self.db.execute(select(Temple).where(*criteria).limit(1))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Temple lookup failed: {e}", exc_info=True)
            raise UpstreamFailure("Failed to query temples") from e

    async def find(
        self,
        *criteria,
        order_by: Sequence[Any] = (),
        offset: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Temple]:
        query = select(Temple).where(*criteria).order_by(*order_by)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        try:
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Temple query failed: {e}", exc_info=True)
            raise UpstreamFailure("Failed to fetch temples") from e

    async def count(self, *criteria) -> int:
        try:
            result = await self.db.execute(select(func.count(Temple.id)).where(*criteria))
            return result.scalar() or 0
        except SQLAlchemyError as e:
            logger.error(f"Temple count failed: {e}", exc_info=True)
            raise UpstreamFailure("Failed to count temples") from e

    async def create(self, temple: Temple) -> Temple:
        self.db.add(temple)
        await self._commit("create temple")
        await self.db.refresh(temple)
        logger.info(f"Created temple {temple.id} ({temple.slug})", extra={"temple_id": temple.id})
        return temple

    async def save(self, temple: Temple) -> Temple:
        self.db.add(temple)
        await self._commit("update temple details")
        return temple

    async def _commit(self, action: str) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Integrity error while trying to {action}: {e}")
            raise Conflict("A temple with these details already exists.") from e
        except StaleDataError as e:
            await self.db.rollback()
            logger.warning(f"Concurrent modification while trying to {action}: {e}")
            raise Conflict("The temple was modified concurrently. Please retry.") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to {action}: {e}", exc_info=True)
            raise UpstreamFailure(f"Failed to {action}") from e
