from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from autologin.core.config import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,  # Disable SQLAlchemy query logging
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
