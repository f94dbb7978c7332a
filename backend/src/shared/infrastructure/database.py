from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from shared.config import settings

engine = create_async_engine(settings.DATABASE_URL, pool_pre_ping=True)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def init_models() -> None:
    """Create all tables. Only used when AUTO_CREATE_TABLES is enabled."""
    import audit.infrastructure.models  # noqa: F401
    import comments.infrastructure.models  # noqa: F401
    import documents.infrastructure.models  # noqa: F401
    import revisions.infrastructure.models  # noqa: F401
    import timeline.infrastructure.models  # noqa: F401
    import versions.infrastructure.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
