from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any
import logging

from sqlalchemy import event, Engine, Result, CursorResult
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool

import config
from models.base import Base

"""
Imports of these models are needed to correctly create tables in the database.
For more information see https://stackoverflow.com/questions/7478403/sqlalchemy-classes-across-files
"""
from models.user import User
from models.cart import CartItem
from models.order import Order

logger = logging.getLogger(__name__)

# SQLAlchemy logging configuration
# HARD DISABLE SQL echo - statements are silenced in utils/logging_config.py as well
sql_echo = False

url = make_url(config.DB_URL)
is_sqlite = url.get_backend_name() == "sqlite"

if is_sqlite and url.database and url.database != ":memory:":
    # sqlite+aiosqlite:///data/storefront.db needs ./data to exist
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)

# SQLite: one connection per session, no connection is shared between event loops
engine = create_async_engine(url, echo=sql_echo, poolclass=NullPool if is_sqlite else None)
session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def get_db_session() -> AsyncSession:
    session = None
    try:
        async with session_maker() as async_session:
            session = async_session
            yield session
    finally:
        if session is not None:
            await session.close()


async def session_execute(stmt, session: AsyncSession) -> Result[Any] | CursorResult[Any]:
    query_result = await session.execute(stmt)
    return query_result


async def session_flush(session: AsyncSession) -> None:
    await session.flush()


async def session_commit(session: AsyncSession) -> None:
    await session.commit()


async def session_rollback(session: AsyncSession) -> None:
    await session.rollback()


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    if not is_sqlite:
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


async def create_db_and_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"[Init] Database tables ready ({url.get_backend_name()})")


async def drop_db_and_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
