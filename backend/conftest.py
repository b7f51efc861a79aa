"""
Pytest configuration file for backend testing.
"""
import os
import sys
from pathlib import Path

# Tests run against in-memory SQLite; set before any settings are cached
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUDIT_FILE_LOGGING", "false")
os.environ.setdefault("ENVIRONMENT", "test")

# Add the backend directory to Python path so imports work correctly
backend_dir = Path(__file__).parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from datetime import datetime  # noqa: E402

from core.audit_logger import QualityAuditLogger  # noqa: E402
from core.config import get_settings  # noqa: E402
from core.database import build_engine, build_sessionmaker, init_models  # noqa: E402

# Import all models to register them with SQLAlchemy
from modules.production.models import production_models  # noqa: E402,F401
from modules.equipment.models import equipment_models  # noqa: E402,F401

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database for each test."""
    test_engine = build_engine(TEST_DATABASE_URL)
    await init_models(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    """Create a test database session."""
    session_factory = build_sessionmaker(engine)
    async with session_factory() as session:
        yield session


@pytest.fixture
def audit_logger(db_session):
    """Audit sink bound to the test session."""
    return QualityAuditLogger(db_session, settings=get_settings())


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for date arithmetic in tests."""
    return datetime(2024, 2, 5, 12, 0, 0)


@pytest.fixture
def clock(now):
    return lambda: now
