"""Tests for post-load data quality checks."""

import pytest
from datetime import datetime


@pytest.fixture
def seeded_engine(engine, backend, start_date):
    """In-memory database filled by a small generator run."""
    from ecommerce_seed.data_generator.generator import EcommerceDataGenerator

    generator = EcommerceDataGenerator(
        backend,
        num_users=8,
        num_products=5,
        num_orders=12,
        items_multiplier=3,
        batch_size=5,
        start_date=start_date,
        seed=1,
        show_progress=False,
    )
    generator.generate_all()
    return engine


@pytest.fixture
def seeded_settings(start_date):
    from ecommerce_seed.config import SeedSettings

    return SeedSettings(
        database_url="sqlite://",
        total_users=8,
        total_products=5,
        total_orders=12,
        items_multiplier=3,
        batch_size=5,
        start_date=start_date,
    )


class TestTableValidator:
    """Tests for individual checks."""

    def test_row_count(self, seeded_engine):
        from ecommerce_seed.quality.validators import TableValidator
        from ecommerce_seed.utils.db_utils import TABLES

        with seeded_engine.connect() as conn:
            validator = TableValidator(conn, TABLES["users"])
            assert validator.check_row_count(min_count=8).passed
            assert not validator.check_row_count(min_count=9).passed
            assert not validator.check_row_count(min_count=1, max_count=7).passed

        assert validator.total_count == 8
        assert not validator.all_passed()

    def test_range(self, seeded_engine):
        from ecommerce_seed.quality.validators import TableValidator
        from ecommerce_seed.utils.db_utils import TABLES

        with seeded_engine.connect() as conn:
            validator = TableValidator(conn, TABLES["orderitems"])
            ok = validator.check_range("quantity", min_value=1, max_value=10)
            too_tight = validator.check_range("product_id", min_value=1, max_value=0)

        assert ok.passed
        assert ok.total_count == 36
        assert not too_tight.passed
        assert too_tight.failed_count == 36
        assert too_tight.failed_percentage == 100

    def test_values_in_set(self, seeded_engine):
        from ecommerce_seed.quality.validators import TableValidator
        from ecommerce_seed.utils.db_utils import TABLES

        with seeded_engine.connect() as conn:
            validator = TableValidator(conn, TABLES["orders"])
            completed = validator.check_values_in_set("status", ["completed"])
            pending = validator.check_values_in_set("status", ["pending"])

        assert completed.passed
        assert pending.failed_count == 12

    def test_not_null_unknown_column(self, seeded_engine):
        from ecommerce_seed.quality.validators import TableValidator, CheckSeverity
        from ecommerce_seed.utils.db_utils import TABLES

        with seeded_engine.connect() as conn:
            validator = TableValidator(conn, TABLES["users"])
            results = validator.check_not_null(["email", "phone"])

        assert results[0].passed
        assert not results[1].passed
        assert results[1].severity == CheckSeverity.ERROR
        assert "does not exist" in results[1].message

    def test_warnings_only_fail_when_requested(self, seeded_engine):
        from ecommerce_seed.quality.validators import TableValidator, CheckSeverity
        from ecommerce_seed.utils.db_utils import TABLES

        with seeded_engine.connect() as conn:
            validator = TableValidator(conn, TABLES["products"])
            validator.check_row_count(min_count=100, severity=CheckSeverity.WARNING)

        assert validator.all_passed()
        assert not validator.all_passed(include_warnings=True)

    def test_summary(self, seeded_engine):
        from ecommerce_seed.quality.validators import TableValidator
        from ecommerce_seed.utils.db_utils import TABLES

        with seeded_engine.connect() as conn:
            validator = TableValidator(conn, TABLES["products"])
            validator.check_range("price", min_value=0, max_value=500)
            summary = validator.get_summary()

        assert "Data Quality Report for products" in summary
        assert "Total rows: 5" in summary
        assert "Checks passed: 1/1" in summary


class TestVerifyLoad:
    """Tests for the full verification pass."""

    def test_generated_data_passes(self, seeded_engine, seeded_settings):
        from ecommerce_seed.quality.validators import verify_load

        validators = verify_load(seeded_engine, seeded_settings)

        assert [v.table_name for v in validators] == ["users", "products", "orders", "orderitems"]
        assert all(v.all_passed() for v in validators)

    def test_appended_rerun_still_passes(self, seeded_engine, seeded_settings, backend, start_date):
        """Row counts above the configured totals are fine after a second run."""
        from ecommerce_seed.data_generator.generator import EcommerceDataGenerator
        from ecommerce_seed.quality.validators import verify_load

        EcommerceDataGenerator(backend, start_date=start_date, show_progress=False).generate_users(8, 5)

        validators = verify_load(seeded_engine, seeded_settings)

        assert validators[0].total_count == 16

    def test_out_of_range_item_fails(self, seeded_engine, seeded_settings):
        from sqlalchemy import insert
        from ecommerce_seed.exceptions import DataQualityError
        from ecommerce_seed.quality.validators import verify_load
        from ecommerce_seed.utils.db_utils import TABLES

        with seeded_engine.begin() as conn:
            conn.execute(insert(TABLES["orderitems"]).values(
                order_id=999, product_id=1, quantity=11, price=10.0
            ))

        with pytest.raises(DataQualityError, match="orderitems"):
            verify_load(seeded_engine, seeded_settings)

    def test_missing_rows_fail(self, engine, seeded_settings):
        from ecommerce_seed.exceptions import DataQualityError
        from ecommerce_seed.quality.validators import verify_load

        with pytest.raises(DataQualityError):
            verify_load(engine, seeded_settings)

    def test_future_timestamp_fails(self, seeded_engine, seeded_settings):
        from ecommerce_seed.exceptions import DataQualityError
        from ecommerce_seed.quality.validators import verify_load

        with pytest.raises(DataQualityError, match="users"):
            verify_load(seeded_engine, seeded_settings, end_date=datetime(2023, 1, 1))
