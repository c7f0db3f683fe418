from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from vidtube.config import get_settings
from vidtube.db.base import Base

settings = get_settings()

engine = create_async_engine(
    settings.async_database_url,
    echo=False,
)

async_session_maker = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def get_db():
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db():
    # Import models so every table is registered on Base.metadata
    import vidtube.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
