"""
Runtime configuration for the seeder.

Everything tunable lives in one pydantic model. The connection string and
pool size come from the environment (optionally from a .env file); row
counts and batch size default to the reference load used for the query
benchmarks:

    users        100,000
    products      10,000
    orders     2,500,000
    order items 7,500,000  (3 per order)
"""

import os
from datetime import datetime
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .exceptions import ConfigurationError


DEFAULT_START_DATE = datetime(2023, 1, 1)


class SeedSettings(BaseModel):
    """Settings for one seeding run."""
    database_url: str = Field(..., min_length=1, description="SQLAlchemy connection URL")
    pool_size: int = Field(10, ge=1, description="Maximum pooled connections")
    batch_size: int = Field(1000, ge=1, description="Rows per bulk insert statement")
    total_users: int = Field(100_000, ge=0)
    total_products: int = Field(10_000, ge=0)
    total_orders: int = Field(2_500_000, ge=0)
    items_multiplier: int = Field(3, ge=0, description="Order items generated per order")
    start_date: datetime = Field(DEFAULT_START_DATE, description="Earliest generated timestamp")
    seed: Optional[int] = Field(None, description="Random seed for reproducible runs")

    @field_validator("start_date")
    @classmethod
    def start_date_must_be_naive(cls, v: datetime) -> datetime:
        """Timestamps are stored in naive DateTime columns."""
        if v.tzinfo is not None:
            raise ValueError("start_date must not carry a timezone")
        return v

    @model_validator(mode="after")
    def referenced_ranges_not_empty(self) -> "SeedSettings":
        """Orders and order items need rows to point at before anything is inserted."""
        if self.total_orders > 0 and self.total_users < 1:
            raise ValueError("total_orders > 0 requires total_users >= 1")
        if self.total_order_items > 0 and (self.total_orders < 1 or self.total_products < 1):
            raise ValueError("order items require total_orders >= 1 and total_products >= 1")
        return self

    @property
    def total_order_items(self) -> int:
        return self.total_orders * self.items_multiplier


def load_settings(env_file: Optional[str] = ".env", **overrides) -> SeedSettings:
    """
    Build settings from the environment plus explicit overrides.

    Args:
        env_file: .env file to load before reading the environment (None to skip)
        **overrides: Field values that take precedence over the environment;
            None values are ignored

    Returns:
        Validated settings

    Raises:
        ConfigurationError: If DATABASE_URL is missing or a value is invalid
    """
    if env_file:
        load_dotenv(env_file)

    values = {}
    if os.getenv("DATABASE_URL"):
        values["database_url"] = os.getenv("DATABASE_URL")
    if os.getenv("DB_POOL_SIZE"):
        values["pool_size"] = os.getenv("DB_POOL_SIZE")

    values.update({key: value for key, value in overrides.items() if value is not None})

    if not values.get("database_url"):
        raise ConfigurationError(
            "DATABASE_URL is not set; export it or pass --database-url"
        )

    try:
        return SeedSettings(**values)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings: {exc}") from exc
