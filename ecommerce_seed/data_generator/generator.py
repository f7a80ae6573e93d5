"""
E-commerce Database Seeder

This module fills the e-commerce database with synthetic rows so the
analytical queries (and their indexes / materialized views) can be tried
at realistic volume. It writes four related tables, in dependency order:
- Users
- Products
- Orders (each referencing a user)
- Order items (each referencing an order and a product)

Rows are built in memory one batch at a time and each batch is sent as a
single multi-row INSERT. Batches are sent one after another; a failed batch
aborts the whole run.

Foreign keys are sampled from the id range the earlier stages were told to
create ([1, total]), not from the ids actually committed. This only holds
when the tables start empty and nothing else writes to them during the run.

Usage:
    python -m ecommerce_seed.data_generator.generator --users 1000 --orders 5000
"""

import random
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

import click
from faker import Faker
from tqdm import tqdm

from ..config import SeedSettings, load_settings, DEFAULT_START_DATE
from ..exceptions import SeedError
from ..quality.validators import verify_load
from ..utils.batching import count_batches, iter_batches
from ..utils.db_utils import DatabaseBackend, create_backend
from .schemas import (
    User, Product, Order, OrderItem, OrderStatus,
    MIN_PRICE, MAX_PRICE, MIN_QUANTITY, MAX_QUANTITY,
)

logger = logging.getLogger(__name__)


EMAIL_DOMAIN = "gmail.com"


@dataclass
class GenerationSummary:
    """Rows and bulk statements submitted per table during one run."""
    rows: Dict[str, int] = field(default_factory=dict)
    batches: Dict[str, int] = field(default_factory=dict)

    def record(self, table: str, rows: int, batches: int) -> None:
        self.rows[table] = self.rows.get(table, 0) + rows
        self.batches[table] = self.batches.get(table, 0) + batches

    @property
    def total_rows(self) -> int:
        return sum(self.rows.values())


class EcommerceDataGenerator:
    """
    Generates synthetic e-commerce rows and writes them in batches.

    The backend is passed in rather than created here, so tests can hand in
    an in-memory database or a recording double.

    Attributes:
        backend: Anything with insert_batch(table_name, rows, batch_index=None)
        num_users: Number of user rows to generate
        num_products: Number of product rows to generate
        num_orders: Number of order rows to generate
        items_multiplier: Order items generated per order
        batch_size: Rows per bulk insert
        start_date: Earliest generated timestamp
        end_date: Latest generated timestamp (None means "now" when a stage starts)
    """

    def __init__(
        self,
        backend: DatabaseBackend,
        num_users: int = 100_000,
        num_products: int = 10_000,
        num_orders: int = 2_500_000,
        items_multiplier: int = 3,
        batch_size: int = 1000,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        seed: Optional[int] = None,
        show_progress: bool = True,
    ):
        self.backend = backend
        self.num_users = num_users
        self.num_products = num_products
        self.num_orders = num_orders
        self.items_multiplier = items_multiplier
        self.batch_size = batch_size
        self.start_date = start_date or DEFAULT_START_DATE
        self.end_date = end_date
        self.show_progress = show_progress

        self.rng = random.Random(seed)
        self.fake = Faker()
        if seed is not None:
            self.fake.seed_instance(seed)

        self.summary = GenerationSummary()

    @classmethod
    def from_settings(
        cls,
        backend: DatabaseBackend,
        settings: SeedSettings,
        show_progress: bool = True,
    ) -> "EcommerceDataGenerator":
        return cls(
            backend,
            num_users=settings.total_users,
            num_products=settings.total_products,
            num_orders=settings.total_orders,
            items_multiplier=settings.items_multiplier,
            batch_size=settings.batch_size,
            start_date=settings.start_date,
            seed=settings.seed,
            show_progress=show_progress,
        )

    def generate_all(self) -> GenerationSummary:
        """
        Generate all four tables in dependency order.

        Returns:
            Summary of rows and batches submitted per table
        """
        logger.info("🏭 Starting data generation...")

        # Order matters! Orders reference users, order items reference orders and products
        self.generate_users(self.num_users, self.batch_size)
        self.generate_products(self.num_products, self.batch_size)
        self.generate_orders(self.num_orders, self.batch_size, self.num_users)
        self.generate_order_items(
            self.num_orders,
            self.items_multiplier,
            self.batch_size,
            self.num_orders,
            self.num_products,
        )

        for table, rows in self.summary.rows.items():
            logger.info(f"✅ Inserted {rows} {table} in {self.summary.batches[table]} batches")

        return self.summary

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    def generate_users(self, total: int, batch_size: int) -> int:
        """Insert `total` users with emails user1@... through user{total}@..."""
        end_date = self._resolve_end_date()
        return self._run_stage(
            "users", total, batch_size,
            lambda offset, size: self.build_user_rows(offset, size, end_date),
        )

    def generate_products(self, total: int, batch_size: int) -> int:
        """Insert `total` products priced uniformly in [0, 500]."""
        return self._run_stage("products", total, batch_size, self.build_product_rows)

    def generate_orders(self, total: int, batch_size: int, user_count: int) -> int:
        """Insert `total` completed orders owned by random users in [1, user_count]."""
        _check_reference_range("user_count", user_count, total)
        end_date = self._resolve_end_date()
        return self._run_stage(
            "orders", total, batch_size,
            lambda offset, size: self.build_order_rows(size, user_count, end_date),
        )

    def generate_order_items(
        self,
        total_orders: int,
        items_multiplier: int,
        batch_size: int,
        order_count: int,
        product_count: int,
    ) -> int:
        """
        Insert total_orders * items_multiplier order items.

        Each item references a random order in [1, order_count] and a random
        product in [1, product_count].
        """
        if items_multiplier < 0:
            raise ValueError(f"items_multiplier must be >= 0, got {items_multiplier}")
        total_items = total_orders * items_multiplier
        _check_reference_range("order_count", order_count, total_items)
        _check_reference_range("product_count", product_count, total_items)

        return self._run_stage(
            "orderitems", total_items, batch_size,
            lambda offset, size: self.build_order_item_rows(size, order_count, product_count),
        )

    def _run_stage(
        self,
        table: str,
        total: int,
        batch_size: int,
        build_rows: Callable[[int, int], List[Dict]],
    ) -> int:
        """
        Build and submit one batch at a time until `total` rows are written.

        build_rows(offset, size) returns the rows of one batch. Each batch is
        awaited before the next is built; errors from the backend propagate.
        """
        batches = iter_batches(total, batch_size)
        logger.info(f"Generating {total} {table} in {count_batches(total, batch_size)} batches of {batch_size}")

        inserted = 0
        batch_count = 0
        with tqdm(total=total, desc=table.title(), unit="rows",
                  disable=not self.show_progress) as progress:
            for batch_index, (offset, size) in enumerate(batches):
                rows = build_rows(offset, size)
                self.backend.insert_batch(table, rows, batch_index=batch_index)
                inserted += len(rows)
                batch_count += 1
                progress.update(len(rows))

        self.summary.record(table, inserted, batch_count)
        return inserted

    # -------------------------------------------------------------------------
    # Row builders
    # -------------------------------------------------------------------------

    def build_user_rows(self, offset: int, count: int, end_date: Optional[datetime] = None) -> List[Dict]:
        """Rows for users offset+1 .. offset+count."""
        end_date = end_date or self._resolve_end_date()
        return [
            User(
                email=f"user{n}@{EMAIL_DOMAIN}",
                created_at=self._random_timestamp(end_date),
            ).model_dump()
            for n in range(offset + 1, offset + count + 1)
        ]

    def build_product_rows(self, offset: int, count: int) -> List[Dict]:
        """Rows for products offset+1 .. offset+count."""
        return [
            Product(
                name=f"Product {n} {self.fake.word().title()}",
                price=self._random_price(),
            ).model_dump()
            for n in range(offset + 1, offset + count + 1)
        ]

    def build_order_rows(self, count: int, user_count: int, end_date: Optional[datetime] = None) -> List[Dict]:
        end_date = end_date or self._resolve_end_date()
        return [
            Order(
                user_id=self.rng.randint(1, user_count),
                created_at=self._random_timestamp(end_date),
                status=OrderStatus.COMPLETED,
            ).model_dump()
            for _ in range(count)
        ]

    def build_order_item_rows(self, count: int, order_count: int, product_count: int) -> List[Dict]:
        return [
            OrderItem(
                order_id=self.rng.randint(1, order_count),
                product_id=self.rng.randint(1, product_count),
                quantity=self.rng.randint(MIN_QUANTITY, MAX_QUANTITY),
                price=self._random_price(),
            ).model_dump()
            for _ in range(count)
        ]

    # -------------------------------------------------------------------------
    # Sampling helpers
    # -------------------------------------------------------------------------

    def _resolve_end_date(self) -> datetime:
        return self.end_date or datetime.now(self.start_date.tzinfo)

    def _random_timestamp(self, end_date: datetime) -> datetime:
        """Uniform timestamp in [start_date, end_date]."""
        span = max((end_date - self.start_date).total_seconds(), 0)
        return self.start_date + timedelta(seconds=self.rng.uniform(0, span))

    def _random_price(self) -> float:
        return round(self.rng.uniform(MIN_PRICE, MAX_PRICE), 2)


def _check_reference_range(name: str, count: int, rows_to_generate: int) -> None:
    """A referenced range must be non-empty whenever rows will point into it."""
    if rows_to_generate > 0 and count < 1:
        raise ValueError(f"{name} must be >= 1 to generate referencing rows, got {count}")


def seed_database(
    settings: SeedSettings,
    verify: bool = False,
    show_progress: bool = True,
) -> GenerationSummary:
    """
    Run a complete seeding pass against the configured database.

    The connection pool is created once, shared by every stage, and
    disposed at the end whether the run succeeded or not.

    Args:
        settings: Connection and volume settings
        verify: Run the post-load quality checks after inserting
        show_progress: Show tqdm progress bars

    Returns:
        Summary of rows and batches submitted per table

    Raises:
        BackendConnectionError: If the database is unreachable
        BatchInsertError: If any batch fails (earlier batches stay committed)
        DataQualityError: If verify is set and a check fails
    """
    backend = create_backend(settings)
    try:
        backend.check_connection()
        generator = EcommerceDataGenerator.from_settings(
            backend, settings, show_progress=show_progress
        )
        summary = generator.generate_all()
        if verify:
            verify_load(backend.engine, settings)
        return summary
    finally:
        backend.close()


# =============================================================================
# CLI Interface
# =============================================================================

@click.command()
@click.option('--database-url', default=None,
              help='SQLAlchemy database URL (defaults to $DATABASE_URL)')
@click.option('--users', '-u', default=100_000, show_default=True, help='Number of users to generate')
@click.option('--products', '-p', default=10_000, show_default=True, help='Number of products to generate')
@click.option('--orders', '-r', default=2_500_000, show_default=True, help='Number of orders to generate')
@click.option('--items-per-order', '-i', default=3, show_default=True, help='Order items generated per order')
@click.option('--batch-size', '-b', default=1000, show_default=True, help='Rows per bulk insert')
@click.option('--pool-size', default=None, type=int, help='Connection pool size (defaults to $DB_POOL_SIZE or 10)')
@click.option('--seed', '-s', default=None, type=int, help='Random seed for reproducibility')
@click.option('--verify/--no-verify', default=False, help='Run data quality checks after loading')
@click.option('--progress/--no-progress', default=True, help='Show progress bars')
def main(
    database_url: Optional[str],
    users: int,
    products: int,
    orders: int,
    items_per_order: int,
    batch_size: int,
    pool_size: Optional[int],
    seed: Optional[int],
    verify: bool,
    progress: bool,
):
    """
    Seed the e-commerce database with synthetic rows.

    Tables must already exist and should be empty: a second run appends
    another full set of rows. If a batch fails, the rows inserted so far
    stay in the database; truncate the tables before running again.

    Example:
        python -m ecommerce_seed.data_generator.generator --users 1000 --orders 5000
    """
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        settings = load_settings(
            database_url=database_url,
            pool_size=pool_size,
            total_users=users,
            total_products=products,
            total_orders=orders,
            items_multiplier=items_per_order,
            batch_size=batch_size,
            seed=seed,
        )
        summary = seed_database(settings, verify=verify, show_progress=progress)
    except SeedError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"\n✨ Seeding complete! {summary.total_rows} rows inserted.")


if __name__ == '__main__':
    main()
