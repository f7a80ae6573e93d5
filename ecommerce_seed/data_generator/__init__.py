"""Data generator package for seeding the e-commerce database."""

from .generator import EcommerceDataGenerator, GenerationSummary, seed_database
from .schemas import (
    User,
    Product,
    Order,
    OrderItem,
    OrderStatus,
)

__all__ = [
    "EcommerceDataGenerator",
    "GenerationSummary",
    "seed_database",
    "User",
    "Product",
    "Order",
    "OrderItem",
    "OrderStatus",
]
