"""Transaction scope shared by services and the chat orchestrator.

Must not import the DI container: services referenced by the container
import this module while the container is being built.
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from api.shared.exceptions import StorageError

logger = structlog.get_logger("bloom.db")


@asynccontextmanager
async def transaction(session: AsyncSession, operation: str) -> AsyncIterator[AsyncSession]:
    """Run a unit of work: commit on success, roll back on any failure.

    Rollback also happens on cancellation and other ``BaseException``s.
    Driver errors are logged and re-raised as ``StorageError`` so raw
    database text never reaches the caller.
    """
    try:
        yield session
        await session.commit()
    except BaseException as exc:
        await session.rollback()
        if isinstance(exc, SQLAlchemyError):
            logger.error("storage_operation_failed", operation=operation, error=str(exc))
            raise StorageError(f"{operation} failed", {"operation": operation}) from exc
        raise
