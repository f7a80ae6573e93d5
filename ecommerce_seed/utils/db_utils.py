"""Utility functions for database operations."""

import logging
from typing import Dict, List, Optional

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    create_engine,
    insert,
    text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from ..config import SeedSettings
from ..exceptions import BackendConnectionError, BatchInsertError, ConfigurationError

logger = logging.getLogger(__name__)


# =============================================================================
# SCHEMA - mirrors the tables created by the database setup step
# =============================================================================

metadata = MetaData()

users_table = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("email", String(255), nullable=False),
    Column("created_at", DateTime, nullable=False),
)

products_table = Table(
    "products",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(255), nullable=False),
    Column("price", Numeric(10, 2, asdecimal=False), nullable=False),
)

orders_table = Table(
    "orders",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("created_at", DateTime, nullable=False),
    Column("status", String(20), nullable=False),
)

order_items_table = Table(
    "orderitems",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("order_id", Integer, ForeignKey("orders.id"), nullable=False),
    Column("product_id", Integer, ForeignKey("products.id"), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("price", Numeric(10, 2, asdecimal=False), nullable=False),
)

TABLES: Dict[str, Table] = {
    table.name: table
    for table in (users_table, products_table, orders_table, order_items_table)
}


def mask_url(engine: Engine) -> str:
    """Render the engine URL with the password hidden, for logging."""
    return engine.url.render_as_string(hide_password=True)


def create_db_engine(database_url: str, pool_size: int = 10) -> Engine:
    """
    Create a pooled SQLAlchemy engine.

    Args:
        database_url: SQLAlchemy URL, e.g. postgresql+psycopg2://user:pw@host/db
        pool_size: Maximum number of pooled connections

    Returns:
        Engine (connections are opened lazily)

    Raises:
        ConfigurationError: If the URL cannot be parsed or names an unknown dialect
    """
    try:
        engine = create_engine(database_url, pool_size=pool_size)
    except ArgumentError as exc:
        raise ConfigurationError(f"Invalid DATABASE_URL: {exc}") from exc

    logger.info(f"Database URL: {mask_url(engine)} (pool size {pool_size})")
    return engine


def create_schema(engine: Engine) -> None:
    """Create the four seed tables if they do not exist yet."""
    metadata.create_all(engine)
    logger.info(f"Schema ready: {', '.join(TABLES)}")


class DatabaseBackend:
    """
    Storage backend the generator writes batches to.

    Wraps a pooled engine and exposes the single capability the generator
    needs: run one multi-row INSERT and either succeed or raise.

    Usage:
        backend = DatabaseBackend(engine)
        try:
            backend.insert_batch("users", rows)
        finally:
            backend.close()
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self.statements_executed = 0

    def check_connection(self) -> None:
        """
        Open one connection and run a trivial query.

        Raises:
            BackendConnectionError: If the database is unreachable or rejects
                the credentials
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise BackendConnectionError(
                f"Could not connect to {mask_url(self.engine)}: {exc}"
            ) from exc

    def insert_batch(
        self,
        table_name: str,
        rows: List[Dict],
        batch_index: Optional[int] = None,
    ) -> None:
        """
        Insert rows with one parameterised multi-row INSERT, in its own transaction.

        Args:
            table_name: One of the keys of TABLES
            rows: Column -> value mappings, all with the same keys
            batch_index: Position of the batch within its stage (for error reporting)

        Raises:
            BatchInsertError: If the statement fails
        """
        if not rows:
            return

        table = TABLES[table_name]
        try:
            with self.engine.begin() as conn:
                conn.execute(insert(table).values(rows))
        except SQLAlchemyError as exc:
            raise BatchInsertError(table_name, batch_index, len(rows), str(exc)) from exc

        self.statements_executed += 1
        logger.debug(f"Inserted {len(rows)} rows into {table_name} (batch {batch_index})")

    def close(self) -> None:
        """Release every pooled connection."""
        self.engine.dispose()
        logger.info("Database connection pool closed")


def create_backend(settings: SeedSettings) -> DatabaseBackend:
    """Build the backend described by the settings."""
    return DatabaseBackend(create_db_engine(settings.database_url, settings.pool_size))
