from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from .config import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

# Объекты остаются читаемыми после commit: ответы строятся уже после сохранения
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_models(metadata) -> None:
    """Создать недостающие таблицы; существующие не трогаются."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Сессия на запрос: Depends(get_db)."""
    async with AsyncSessionLocal() as session:
        yield session
