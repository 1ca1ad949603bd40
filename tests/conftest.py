import sys
import pathlib
import pytest
import httpx
from sqlalchemy.pool import StaticPool

sys.path.append(str(pathlib.Path(__file__).parent.parent/'src'))
sys.path.append(str(pathlib.Path(__file__).parent))

import db.postgres
import tables
from main import app


@pytest.fixture(autouse=True)
async def session_maker():
    # One shared in-memory connection, every session sees the same data
    session_maker = db.postgres.init(
        'sqlite+aiosqlite://',
        poolclass=StaticPool,
        connect_args={'check_same_thread': False}
    )
    assert db.postgres.engine is not None

    async with db.postgres.engine.begin() as conn:
        await conn.run_sync(tables.Base.metadata.create_all)

    yield session_maker

    await db.postgres.dispose()


@pytest.fixture
async def api_client():
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url='http://tests') as client:
        yield client


@pytest.fixture
async def admin(session_maker):
    from helpers import create_user
    return await create_user(session_maker, role='admin', name='admin')


@pytest.fixture
async def lecturer(session_maker):
    from helpers import create_user
    return await create_user(session_maker, role='lecturer', name='khongguan', full_name='Prof. Dr. Khong Guan')


@pytest.fixture
async def student(session_maker):
    from helpers import create_user
    return await create_user(session_maker, role='student', name='budi', email='budi@example.com')


@pytest.fixture
async def category(session_maker):
    from helpers import create_category
    return await create_category(session_maker, name='Keuangan')
