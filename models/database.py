# models/database.py
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings

# A refused or timed-out connection comes out of the driver unwrapped, so
# "the store is unavailable" is wider than SQLAlchemyError
STORE_ERRORS = (SQLAlchemyError, OSError, asyncio.TimeoutError)

class Base(DeclarativeBase):
    pass

def build_engine(database_url: Optional[str] = None) -> AsyncEngine:
    return create_async_engine(
        database_url or settings.database_url,
        echo=settings.database_echo,
        pool_pre_ping=True,
    )

def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Request-scoped session from the process-wide sessionmaker built in the
    app lifespan.
    """
    async with request.app.state.sessionmaker() as session:
        yield session

@asynccontextmanager
async def standalone_session(database_url: Optional[str] = None) -> AsyncIterator[AsyncSession]:
    """Session with its own engine, for scripts running outside the API process."""
    engine = build_engine(database_url)
    try:
        async with build_sessionmaker(engine)() as session:
            yield session
    finally:
        await engine.dispose()
