"""
Shared fixtures: both storage backends, an HTTP client and catalog sample data
"""
import os

# Settings are read once at import time, so configure them before importing the app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ANALYTICS_MODE", "live")

from types import SimpleNamespace

import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.main import app as fastapi_app
from app.services.preferences import InMemoryPreferenceStore
from app.storage import DatabaseStorage, MemoryStorage, get_storage
from app.utils.database import Base, build_sessionmaker
from app.utils.redis import get_preference_store


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
async def sql_storage():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with build_sessionmaker(engine)() as session:
        yield DatabaseStorage(session)

    await engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def storage(request):
    """Runs a test once per backend; both must honour the same contract"""
    if request.param == "memory":
        return MemoryStorage()
    return request.getfixturevalue("sql_storage")


@pytest.fixture
def preference_data():
    return {}


@pytest.fixture
async def client(memory_storage, preference_data):
    async def override_storage():
        return memory_storage

    async def override_preferences():
        return InMemoryPreferenceStore("test-client", preference_data)

    fastapi_app.dependency_overrides[get_storage] = override_storage
    fastapi_app.dependency_overrides[get_preference_store] = override_preferences

    transport = httpx.ASGITransport(app=fastapi_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client

    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def admin_user(memory_storage):
    return await memory_storage.users.create_user({
        "username": "admin",
        "password": "admin-password",
        "role": "admin",
    })


@pytest.fixture
async def traveler(memory_storage):
    return await memory_storage.users.create_user({
        "username": "traveler",
        "password": "traveler-password",
    })


def destination_data(**overrides):
    data = {
        "name": "Bali Beach Retreat",
        "country": "Indonesia",
        "description": "Sunsets, surf and rice terraces",
        "price": "1500",
        "duration": 7,
        "max_guests": 4,
        "rating": "4.8",
    }
    data.update(overrides)
    return data


def make_destination(**overrides):
    """Lightweight destination record for the pure catalog functions"""
    fields = {
        "id": 1,
        "name": "Bali Beach Retreat",
        "country": "Indonesia",
        "description": "Sunsets, surf and rice terraces",
        "price": "1500",
        "duration": 7,
        "rating": "4.8",
        "promo_tag": None,
        "discount_percentage": 0,
        "seasonal_tag": None,
        "flash_sale": False,
        "coupon_code": None,
        "group_discount_min": 0,
        "loyalty_discount": 0,
        "bundle_deal": None,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)
