"""
Campus complaint portal - test configuration and fixtures
"""
import os
import tempfile
from typing import AsyncGenerator, Generator

# environment must be in place before core.config is imported
_TMP_DIR = tempfile.mkdtemp(prefix="campus-portal-tests-")
os.environ['LOG_DIR'] = os.path.join(_TMP_DIR, 'logs')
os.environ['SQLITE_PATH'] = os.path.join(_TMP_DIR, 'unused.db')
os.environ['MIRROR_CACHE_PATH'] = os.path.join(_TMP_DIR, 'mirror_cache.json')
os.environ['LOCAL_STORE_PATH'] = os.path.join(_TMP_DIR, 'local_store.json')
os.environ['ADMIN_USERNAME'] = 'Campuz'
os.environ['ADMIN_PASSWORD'] = 'Campuz@001'
os.environ['JWT_SECRET'] = 'test-jwt-secret'

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.orm import Session, sessionmaker
from faker import Faker

from app_fastapi import app
from db.seed import init_db
from db.session import get_db, make_engine, make_session_factory
from routers.admin_user import create_access_token
from services.complaint_service import ComplaintService
from services.reference_service import category_service, location_service
from services.stats_service import StatsService
from storage.local_store import LocalStore
from storage.sql_store import SqlStore

fake = Faker()


@pytest.fixture
def session_factory(tmp_path) -> Generator[sessionmaker, None, None]:
    """Fresh SQLite file per test, tables created and seeded"""
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}", echo=False)
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(params=['sql', 'local'])
def store(request, db_session):
    """Every service test runs against both storage adapters"""
    if request.param == 'sql':
        return SqlStore(db_session)
    return LocalStore()


@pytest.fixture
def complaint_service(store) -> ComplaintService:
    return ComplaintService(store)


@pytest.fixture
def categories(store):
    return category_service(store)


@pytest.fixture
def locations(store):
    return location_service(store)


@pytest.fixture
def stats_service(store) -> StatsService:
    return StatsService(store)


@pytest.fixture
def complaint_data():
    """Test complaint data"""
    return {
        "student_name": fake.name(),
        "email": fake.email(),
        "title": "Broken street light",
        "description": "The light near the library has been out for a week.",
        "category": "Campus",
        "location": "Library",
        "images": [],
    }


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Test client with the DB dependency pointed at the per-test SQLite file"""
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict:
    """Bearer header for the admin routes"""
    token = create_access_token('Campuz')
    return {'Authorization': f'Bearer {token}'}
