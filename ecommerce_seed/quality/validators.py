"""
Data Quality Validators

This module checks a freshly seeded database against the rules the
generator is supposed to follow:
1. Row counts (at least the configured totals were written)
2. Null checks (required columns present)
3. Range checks (prices, quantities, timestamps, foreign key ranges)
4. Allowed values (order status)

Foreign keys are checked by range only, matching how they were generated.
Checks run as COUNT(*) queries so they stay cheap on millions of rows.
"""

from datetime import datetime
from typing import List, Optional, Sequence
from dataclasses import dataclass
from enum import Enum
import logging

from sqlalchemy import Table, func, or_, select
from sqlalchemy.engine import Connection, Engine

from ..config import SeedSettings
from ..exceptions import DataQualityError
from ..utils.db_utils import TABLES

logger = logging.getLogger(__name__)


class CheckSeverity(Enum):
    """Severity levels for data quality issues."""
    WARNING = "warning"   # Log but continue
    ERROR = "error"       # Fail the run
    INFO = "info"         # Informational only


@dataclass
class QualityCheckResult:
    """Result of a data quality check."""
    check_name: str
    passed: bool
    severity: CheckSeverity
    message: str
    failed_count: int = 0
    total_count: int = 0
    failed_percentage: float = 0.0

    def __str__(self):
        status = "✅ PASSED" if self.passed else "❌ FAILED"
        return (f"{status} [{self.severity.value.upper()}] {self.check_name}: "
                f"{self.message} ({self.failed_count}/{self.total_count} = "
                f"{self.failed_percentage:.2f}%)")


class TableValidator:
    """
    Data quality validator for one database table.

    Usage:
        with engine.connect() as conn:
            validator = TableValidator(conn, TABLES["orders"])
            validator.check_values_in_set("status", ["completed"])

        if not validator.all_passed():
            raise DataQualityError("Quality checks failed")
    """

    def __init__(self, connection: Connection, table: Table):
        self.connection = connection
        self.table = table
        self.table_name = table.name
        self.results: List[QualityCheckResult] = []
        self._total_count = None

    @property
    def total_count(self) -> int:
        """Lazily compute and cache total row count."""
        if self._total_count is None:
            self._total_count = self.connection.execute(
                select(func.count()).select_from(self.table)
            ).scalar_one()
        return self._total_count

    def _count_where(self, condition) -> int:
        return self.connection.execute(
            select(func.count()).select_from(self.table).where(condition)
        ).scalar_one()

    def _record(
        self,
        check_name: str,
        failed_count: int,
        severity: CheckSeverity,
        message: str,
    ) -> QualityCheckResult:
        result = QualityCheckResult(
            check_name=check_name,
            passed=failed_count == 0,
            severity=severity,
            message=message,
            failed_count=failed_count,
            total_count=self.total_count,
            failed_percentage=(failed_count / self.total_count * 100
                               if self.total_count > 0 else 0)
        )
        self.results.append(result)
        return result

    def check_not_null(
        self,
        columns: List[str],
        severity: CheckSeverity = CheckSeverity.ERROR
    ) -> List[QualityCheckResult]:
        """
        Check that specified columns have no null values.

        Args:
            columns: Column names to check
            severity: How to treat failures

        Returns:
            List of check results
        """
        results = []

        for col_name in columns:
            if col_name not in self.table.c:
                result = QualityCheckResult(
                    check_name=f"not_null_{col_name}",
                    passed=False,
                    severity=CheckSeverity.ERROR,
                    message=f"Column '{col_name}' does not exist in {self.table_name}"
                )
                self.results.append(result)
                results.append(result)
                continue

            null_count = self._count_where(self.table.c[col_name].is_(None))
            results.append(self._record(
                f"not_null_{col_name}", null_count, severity,
                f"Null check for '{col_name}'",
            ))

        return results

    def check_values_in_set(
        self,
        column: str,
        valid_values: Sequence,
        severity: CheckSeverity = CheckSeverity.ERROR
    ) -> QualityCheckResult:
        """
        Check that column values are within a set of valid values.

        Args:
            column: Column to check
            valid_values: Allowed values
            severity: How to treat failures

        Returns:
            Check result
        """
        invalid_count = self._count_where(~self.table.c[column].in_(list(valid_values)))
        return self._record(
            f"valid_values_{column}", invalid_count, severity,
            f"Values in '{column}' must be one of {list(valid_values)}",
        )

    def check_range(
        self,
        column: str,
        min_value=None,
        max_value=None,
        severity: CheckSeverity = CheckSeverity.ERROR
    ) -> QualityCheckResult:
        """
        Check that column values fall within a range.

        Works for numbers and timestamps alike.

        Args:
            column: Column to check
            min_value: Minimum allowed value (inclusive)
            max_value: Maximum allowed value (inclusive)
            severity: How to treat failures

        Returns:
            Check result
        """
        col = self.table.c[column]
        conditions = []
        if min_value is not None:
            conditions.append(col < min_value)
        if max_value is not None:
            conditions.append(col > max_value)

        invalid_count = self._count_where(or_(*conditions)) if conditions else 0

        return self._record(
            f"range_{column}", invalid_count, severity,
            f"Values in '{column}' must be in range [{min_value}, {max_value}]",
        )

    def check_row_count(
        self,
        min_count: int = 1,
        max_count: Optional[int] = None,
        severity: CheckSeverity = CheckSeverity.ERROR
    ) -> QualityCheckResult:
        """
        Check that the table has expected number of rows.

        Args:
            min_count: Minimum expected rows
            max_count: Maximum expected rows (optional)
            severity: How to treat failures

        Returns:
            Check result
        """
        count = self.total_count
        passed = count >= min_count
        if max_count is not None:
            passed = passed and count <= max_count

        range_desc = f">= {min_count}"
        if max_count is not None:
            range_desc = f"[{min_count}, {max_count}]"

        result = QualityCheckResult(
            check_name="row_count",
            passed=passed,
            severity=severity,
            message=f"Row count ({count}) must be {range_desc}",
            failed_count=0 if passed else 1,
            total_count=count
        )
        self.results.append(result)
        return result

    def all_passed(self, include_warnings: bool = False) -> bool:
        """
        Check if all quality checks passed.

        Args:
            include_warnings: If True, warnings count as failures

        Returns:
            True if all checks passed
        """
        for result in self.results:
            if not result.passed:
                if result.severity == CheckSeverity.ERROR:
                    return False
                if include_warnings and result.severity == CheckSeverity.WARNING:
                    return False
        return True

    def get_summary(self) -> str:
        """Get a summary of all check results."""
        lines = [f"Data Quality Report for {self.table_name}"]
        lines.append("=" * 50)
        lines.append(f"Total rows: {self.total_count}")
        lines.append("")

        passed_count = sum(1 for r in self.results if r.passed)
        lines.append(f"Checks passed: {passed_count}/{len(self.results)}")
        lines.append("")

        for result in self.results:
            lines.append(str(result))

        return "\n".join(lines)

    def log_results(self):
        """Log all results using the logging module."""
        logger.info(f"Data Quality Results for {self.table_name}")

        for result in self.results:
            if result.passed:
                logger.info(str(result))
            elif result.severity == CheckSeverity.WARNING:
                logger.warning(str(result))
            else:
                logger.error(str(result))


# =============================================================================
# PRE-BUILT VALIDATION SUITES
# =============================================================================

def validate_users(
    connection: Connection,
    expected_count: int,
    start_date: datetime,
    end_date: datetime,
) -> TableValidator:
    """Run standard validation suite for the users table."""
    validator = TableValidator(connection, TABLES["users"])

    validator.check_row_count(min_count=expected_count)
    validator.check_not_null(["email", "created_at"])
    validator.check_range("created_at", min_value=start_date, max_value=end_date)

    return validator


def validate_products(connection: Connection, expected_count: int) -> TableValidator:
    """Run standard validation suite for the products table."""
    from ..data_generator.schemas import MIN_PRICE, MAX_PRICE

    validator = TableValidator(connection, TABLES["products"])

    validator.check_row_count(min_count=expected_count)
    validator.check_not_null(["name", "price"])
    validator.check_range("price", min_value=MIN_PRICE, max_value=MAX_PRICE)

    return validator


def validate_orders(
    connection: Connection,
    expected_count: int,
    user_count: int,
    start_date: datetime,
    end_date: datetime,
) -> TableValidator:
    """Run standard validation suite for the orders table."""
    from ..data_generator.schemas import OrderStatus

    validator = TableValidator(connection, TABLES["orders"])

    validator.check_row_count(min_count=expected_count)
    validator.check_not_null(["user_id", "created_at", "status"])
    validator.check_values_in_set("status", [OrderStatus.COMPLETED.value])
    validator.check_range("created_at", min_value=start_date, max_value=end_date)

    # Referential range
    validator.check_range("user_id", min_value=1, max_value=user_count)

    return validator


def validate_order_items(
    connection: Connection,
    expected_count: int,
    order_count: int,
    product_count: int,
) -> TableValidator:
    """Run standard validation suite for the orderitems table."""
    from ..data_generator.schemas import MIN_PRICE, MAX_PRICE, MIN_QUANTITY, MAX_QUANTITY

    validator = TableValidator(connection, TABLES["orderitems"])

    validator.check_row_count(min_count=expected_count)
    validator.check_not_null(["order_id", "product_id", "quantity", "price"])

    # Value ranges
    validator.check_range("quantity", min_value=MIN_QUANTITY, max_value=MAX_QUANTITY)
    validator.check_range("price", min_value=MIN_PRICE, max_value=MAX_PRICE)

    # Referential ranges
    validator.check_range("order_id", min_value=1, max_value=order_count)
    validator.check_range("product_id", min_value=1, max_value=product_count)

    return validator


def verify_load(
    engine: Engine,
    settings: SeedSettings,
    end_date: Optional[datetime] = None,
) -> List[TableValidator]:
    """
    Run every validation suite against a seeded database.

    Row counts only need to reach the configured totals: re-running the
    seeder appends, so larger tables are expected.

    Args:
        engine: Engine of the seeded database
        settings: Settings the seeding run used
        end_date: Latest acceptable timestamp (defaults to now)

    Returns:
        The validators, one per table

    Raises:
        DataQualityError: If any ERROR-severity check failed
    """
    end_date = end_date or datetime.now()

    with engine.connect() as conn:
        validators = [
            validate_users(conn, settings.total_users, settings.start_date, end_date),
            validate_products(conn, settings.total_products),
            validate_orders(conn, settings.total_orders, settings.total_users,
                            settings.start_date, end_date),
            validate_order_items(conn, settings.total_order_items,
                                 settings.total_orders, settings.total_products),
        ]

    for validator in validators:
        validator.log_results()

    failed = [v.table_name for v in validators if not v.all_passed()]
    if failed:
        raise DataQualityError(f"Data quality checks failed for: {', '.join(failed)}")

    logger.info("All data quality checks passed")
    return validators
