"""Data quality validators package."""

from .validators import (
    TableValidator,
    QualityCheckResult,
    CheckSeverity,
    validate_users,
    validate_products,
    validate_orders,
    validate_order_items,
    verify_load,
)

__all__ = [
    "TableValidator",
    "QualityCheckResult",
    "CheckSeverity",
    "validate_users",
    "validate_products",
    "validate_orders",
    "validate_order_items",
    "verify_load",
]
