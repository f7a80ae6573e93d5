"""
Create the Seed Tables

The seeder expects users, products, orders and orderitems to exist already.
This script creates them for local development databases; production
schemas are managed outside this repository.

Usage:
    python scripts/create_schema.py --database-url sqlite:///data/seed.db
    DATABASE_URL=postgresql+psycopg2://user:pw@localhost/shop python scripts/create_schema.py
"""

import sys
import logging
import argparse
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from ecommerce_seed.config import load_settings
from ecommerce_seed.exceptions import SeedError
from ecommerce_seed.utils.db_utils import create_db_engine, create_schema

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Create the e-commerce seed tables")
    parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy database URL (defaults to $DATABASE_URL)"
    )

    args = parser.parse_args()

    try:
        settings = load_settings(database_url=args.database_url)
        engine = create_db_engine(settings.database_url, settings.pool_size)
    except SeedError as exc:
        parser.error(str(exc))

    try:
        create_schema(engine)
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()
