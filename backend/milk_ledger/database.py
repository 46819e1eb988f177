from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
import logging

from milk_ledger.config import DATABASE_URL, SQL_ECHO

logger = logging.getLogger(__name__)

# Async engine for FastAPI, one pool per process
engine = create_async_engine(DATABASE_URL, echo=SQL_ECHO)

async_session_factory = async_sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)


# Declarative base class
class Base(DeclarativeBase):
    pass


# Create missing tables (IF NOT EXISTS semantics)
async def init_db():
    # models must be registered on Base.metadata before create_all
    from milk_ledger import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready: %s", ", ".join(sorted(Base.metadata.tables)))


# Dependency to get async session
async def get_db():
    async with async_session_factory() as session:
        yield session
