"""
Gatherly Backend — Repository Base (Unit of Work)
===================================================

What:  Shared save/flush behaviour for every repository.
How:   save_changes() counts the entities the session will write, commits,
       and returns that count. Workflows treat 0 as "nothing was persisted".

Why count before committing:
    SQLAlchemy's commit() returns nothing. The identity map already knows
    which objects are new, modified or deleted, so the count is read from
    session.new / session.dirty / session.deleted just before the flush.
    A relationship-only change (appending to user.photos) marks the parent
    dirty and the child new, so both are counted.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError

logger = logging.getLogger(__name__)


class SqlAlchemyRepository:
    """Base class holding the request-scoped session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def pending_changes(self) -> int:
        """Number of entities the next flush would insert, update or delete."""
        session = self.session
        modified = sum(1 for obj in session.dirty if session.is_modified(obj))
        return len(session.new) + len(session.deleted) + modified

    async def flush(self) -> None:
        """
        Write pending changes without committing.

        Used where statement order matters, e.g. demoting the old main photo
        before promoting the new one so the partial unique index never sees
        two main photos.
        """
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Flush failed: %s", str(e))
            raise DatabaseError(context={"error_type": type(e).__name__})

    async def discard_changes(self) -> None:
        """Roll back whatever the unit of work has pending."""
        await self.session.rollback()

    async def save_changes(self) -> int:
        """
        Commit the unit of work and return the number of changed entities.

        Returns:
            Count of inserted + updated + deleted entities (0 if nothing was
            pending). Changes flushed earlier in the same transaction are not
            counted again.

        Raises:
            DatabaseError: the commit failed; the transaction is rolled back.
        """
        changed = self.pending_changes()
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Commit failed after %d pending changes: %s", changed, str(e))
            raise DatabaseError(
                context={"error_type": type(e).__name__, "pending_changes": changed},
            )
        logger.debug("Committed %d changed entities", changed)
        return changed
