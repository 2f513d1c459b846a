"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import sys
import os
from unittest.mock import MagicMock
import pytest
import pytest_asyncio
from fakeredis import FakeAsyncRedis
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Mock config module completely before any imports
config_mock = MagicMock()
config_mock.DB_URL = "sqlite+aiosqlite:///:memory:"  # In-memory test database
config_mock.SHOP_LANGUAGE = "en"  # For Localizator
config_mock.CURRENCY = "VND"
config_mock.LOGIN_MAX_ATTEMPTS = 5
config_mock.LOGIN_LOCK_HOURS = 24
config_mock.LOGIN_RATE_LIMIT_MAX_ATTEMPTS = 10
config_mock.LOGIN_RATE_LIMIT_WINDOW_SECONDS = 15 * 60
config_mock.LOGIN_RATE_LIMIT_BACKEND = "memory"
config_mock.REDIS_HOST = "localhost"
config_mock.REDIS_PASSWORD = None
config_mock.PROMO_DISCOUNT_PERCENT = 15
config_mock.WEEKEND_MILK_TEA_PRICE = 20000
config_mock.LOG_LEVEL = "INFO"
config_mock.LOG_MASK_SECRETS = True
config_mock.LOG_RETENTION_DAYS = 5
config_mock.LOGIN_LOG_RETENTION_DAYS = 30
config_mock.AUDIT_LOG_RETENTION_DAYS = 90
config_mock.LOG_CLEANUP_INTERVAL_HOURS = 24
config_mock.WEBAPP_HOST = "127.0.0.1"
config_mock.WEBAPP_PORT = 3000

sys.modules['config'] = config_mock


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create test database engine (in-memory SQLite)."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False
    )

    # Import and create all tables
    from db import Base
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine):
    """Create test database session."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


# ============================================================================
# Redis Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def redis_client():
    """Create fake Redis client for testing (no real Redis server needed)."""
    client = FakeAsyncRedis(decode_responses=True)
    yield client
    await client.aclose()


# ============================================================================
# Domain Fixtures
# ============================================================================

@pytest.fixture
def make_user(test_session):
    """Factory creating a persisted user with a bcrypt password."""
    from enums.user_role import UserRole
    from models.user import User
    from utils.password import hash_password

    counter = {"n": 0}

    async def _make_user(password: str = "secret123", role: UserRole = UserRole.CUSTOMER,
                         email: str | None = None, **fields) -> User:
        counter["n"] += 1
        user = User(
            name=f"User {counter['n']}",
            email=email or f"user{counter['n']}@example.com",
            password_hash=hash_password(password),
            role=role,
            **fields
        )
        test_session.add(user)
        await test_session.commit()
        return user

    return _make_user


@pytest_asyncio.fixture
async def catalog(test_session):
    """
    A small drink menu:
    coffee (S/M/L), milk tea (M/L), fruit tea (M) and two toppings.
    """
    from enums.product_category import ProductCategory
    from models.product import Product, ProductSize

    coffee = Product(name="Cà phê sữa đá", category=ProductCategory.COFFEE, sizes=[
        ProductSize(size="S", price=25000, position=0),
        ProductSize(size="M", price=30000, position=1),
        ProductSize(size="L", price=35000, position=2),
    ])
    milk_tea = Product(name="Trà sữa trân châu", category=ProductCategory.MILK_TEA, sizes=[
        ProductSize(size="M", price=35000, position=0),
        ProductSize(size="L", price=40000, position=1),
    ])
    fruit_tea = Product(name="Trà đào cam sả", category=ProductCategory.FRUIT_TEA, sizes=[
        ProductSize(size="M", price=30000, position=0),
    ])
    pearls = Product(name="Trân châu đen", category=ProductCategory.TOPPING, price=10000)
    jelly = Product(name="Thạch dừa", category=ProductCategory.TOPPING, price=5000)
    for product in (coffee, milk_tea, fruit_tea, pearls, jelly):
        test_session.add(product)
    await test_session.commit()
    return {
        "coffee": coffee,
        "milk_tea": milk_tea,
        "fruit_tea": fruit_tea,
        "pearls": pearls,
        "jelly": jelly,
    }
