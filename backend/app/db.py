from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase

from app.config import ASYNC_DATABASE_URL


class Base(DeclarativeBase):
    pass


# local dev default is SQLite; production points ASYNC_DATABASE_URL at postgresql+asyncpg
_connect_args = {"check_same_thread": False} if ASYNC_DATABASE_URL.startswith("sqlite") else {}

engine = create_async_engine(ASYNC_DATABASE_URL, echo=False, pool_pre_ping=True, connect_args=_connect_args)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_db():
    async with SessionLocal() as session:
        yield session
