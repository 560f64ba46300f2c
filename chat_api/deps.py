import logging
from typing import AsyncIterator

from fastapi import HTTPException, Request, status
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Open a session for the request and make sure the database answers."""
    async with request.app.state.sessionmaker() as db:
        try:
            await db.connection()
        except DBAPIError as exc:
            message = (
                "Database connection failed. Check credentials (DB_SERVER, etc.) "
                f"and host permissions: {exc.orig}"
            )
            logger.error(message)
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)
        yield db
