import logging
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from storefront.config import Config

logger = logging.getLogger(__name__)


def engine_options(database_url: str) -> dict:
    # SQLite engines pick their own pool class and reject queue sizing
    if database_url.startswith("sqlite"):
        return {}
    return {
        "pool_size": Config.DB_POOL_SIZE,
        "max_overflow": Config.DB_MAX_OVERFLOW,
        "pool_timeout": Config.DB_POOL_TIMEOUT,
    }


async_engine = create_async_engine(
    Config.DATABASE_URL,
    echo=Config.DATABASE_ECHO,
    future=True,
    **engine_options(Config.DATABASE_URL)
)

Session = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def init_db() -> None:
    async with async_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_session() -> AsyncSession: # type: ignore
    async with Session() as session:
        try:
            yield session
        except Exception as e:
            logger.error(f"Session error: {e}")
            raise
