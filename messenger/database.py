import logging
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from messenger.config import settings
from messenger.exceptions import ConflictError, StoreError

logger = logging.getLogger(__name__)

async_engine = create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG, pool_pre_ping=True)
AsyncSessionLocal = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()

@asynccontextmanager
async def atomic(session: AsyncSession):
    """Run a group of writes as one transaction.

    Commits when the block exits normally; any exception rolls back every
    write made in the block. Integrity violations surface as ``ConflictError``
    and other database failures as ``StoreError``.
    """
    try:
        yield session
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        logger.warning("Integrity violation, transaction rolled back: %s", exc.orig)
        raise ConflictError("Record already exists or references a missing record") from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("Store failure, transaction rolled back: %s", exc)
        raise StoreError("Storage failure") from exc
    except BaseException:
        await session.rollback()
        raise

async def check_connection(engine=async_engine):
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))

async def create_tables(engine=async_engine):
    from messenger.models.base import Base
    from messenger.models import user, relationship_list, chat, chat_member, message

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
