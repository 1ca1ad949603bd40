from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from settings import pg_settings


engine: AsyncEngine | None = None
session_maker: async_sessionmaker[AsyncSession] | None = None


def init(url: str | None = None, **engine_kwargs) -> async_sessionmaker[AsyncSession]:
    global engine, session_maker

    if url is None:
        url = pg_settings.get_url('psycopg')
        engine_kwargs.setdefault('pool_size', pg_settings.pool_size)
        engine_kwargs.setdefault('max_overflow', pg_settings.max_overflow)

    engine = create_async_engine(url, **engine_kwargs)
    session_maker = async_sessionmaker(engine, expire_on_commit=False)
    return session_maker


async def dispose():
    global engine, session_maker

    if engine is not None:
        await engine.dispose()
    engine = None
    session_maker = None


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    assert session_maker is not None, 'database is not initialized'
    return session_maker
