"""
Pytest configuration and shared fixtures.

Fixtures are reusable test components that provide:
- In-memory databases with the seed schema
- Backend doubles that record batches instead of writing them
- Small settings for fast end-to-end runs

Use fixtures to avoid repeating setup code in each test.
"""

import sys
import pytest
from datetime import datetime
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


class RecordingBackend:
    """Backend double that keeps every submitted batch in memory."""

    def __init__(self, fail_on=None):
        self.batches = []
        self.fail_on = fail_on  # (table, batch_index) that should fail

    def insert_batch(self, table_name, rows, batch_index=None):
        from ecommerce_seed.exceptions import BatchInsertError

        if self.fail_on == (table_name, batch_index):
            raise BatchInsertError(table_name, batch_index, len(rows), "injected failure")
        self.batches.append((table_name, list(rows)))

    def rows_for(self, table_name):
        return [row for table, rows in self.batches if table == table_name for row in rows]

    def batch_sizes(self, table_name):
        return [len(rows) for table, rows in self.batches if table == table_name]


@pytest.fixture
def recording_backend():
    """A backend double that records batches."""
    return RecordingBackend()


@pytest.fixture
def engine():
    """
    Create an in-memory SQLite engine with the seed schema.

    StaticPool keeps a single connection so every checkout sees the same
    in-memory database.
    """
    from sqlalchemy import create_engine
    from sqlalchemy.pool import StaticPool
    from ecommerce_seed.utils.db_utils import create_schema

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_schema(engine)

    yield engine

    engine.dispose()


@pytest.fixture
def backend(engine):
    """A database backend writing to the in-memory engine."""
    from ecommerce_seed.utils.db_utils import DatabaseBackend

    return DatabaseBackend(engine)


@pytest.fixture
def start_date():
    return datetime(2023, 1, 1)


@pytest.fixture
def sqlite_file_url(tmp_path):
    """URL of a file-backed SQLite database that already has the schema."""
    from ecommerce_seed.utils.db_utils import create_db_engine, create_schema

    url = f"sqlite:///{tmp_path / 'seed.db'}"
    engine = create_db_engine(url)
    create_schema(engine)
    engine.dispose()
    return url


@pytest.fixture
def small_settings(sqlite_file_url):
    """Settings for a tiny end-to-end run."""
    from ecommerce_seed.config import SeedSettings

    return SeedSettings(
        database_url=sqlite_file_url,
        pool_size=2,
        batch_size=7,
        total_users=20,
        total_products=10,
        total_orders=30,
        items_multiplier=3,
        seed=42,
    )


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run with no database settings in the environment and no .env file."""
    for name in ("DATABASE_URL", "DB_POOL_SIZE"):
        # setenv first so monkeypatch restores the original state afterwards
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def failing_backend():
    """A recording backend whose second orders batch fails."""
    return RecordingBackend(fail_on=("orders", 1))


@pytest.fixture
def make_backend():
    """Factory for extra recording backends within one test."""
    return RecordingBackend
