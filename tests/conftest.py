import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from chat_api.database import build_engine, build_sessionmaker, create_db_and_tables
from chat_api.settings import Settings
from main import create_app


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway SQLite file"""
    return Settings(DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'chat.db'}", _env_file=None)


@pytest.fixture
def client(settings):
    """TestClient with lifespan, so tables exist"""
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def engine(settings):
    test_engine = build_engine(settings)
    await create_db_and_tables(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def db(engine):
    async with build_sessionmaker(engine)() as session:
        yield session
