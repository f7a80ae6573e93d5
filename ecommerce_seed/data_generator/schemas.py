"""
Row models for the seeded e-commerce tables.

This module defines the rows the generator submits using Pydantic models.
Every generated row passes through its model before it is batched, so the
documented bounds (prices, quantities, foreign key ranges) are enforced
before anything reaches the database.

Ids are not part of the models: the database assigns them sequentially.
"""

from datetime import datetime
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


MIN_PRICE = 0
MAX_PRICE = 500
MIN_QUANTITY = 1
MAX_QUANTITY = 10


class OrderStatus(str, Enum):
    """Status written to orders.status."""
    COMPLETED = "completed"


class User(BaseModel):
    """A shop account. Emails follow user{n}@gmail.com and are not unique across runs."""
    email: str = Field(..., min_length=3, description="Account email address")
    created_at: datetime = Field(..., description="When the account was created")


class Product(BaseModel):
    """An item in the catalog."""
    name: str = Field(..., min_length=1, description="Product display name")
    price: float = Field(..., ge=MIN_PRICE, le=MAX_PRICE, description="Catalog price")


class Order(BaseModel):
    """
    A purchase placed by a user.

    user_id only has to fall inside the generated users' id range; it is
    never checked against committed rows.
    """
    model_config = ConfigDict(use_enum_values=True)

    user_id: int = Field(..., ge=1, description="Reference to users.id")
    created_at: datetime = Field(..., description="When the order was placed")
    status: OrderStatus = Field(OrderStatus.COMPLETED, description="Order status")


class OrderItem(BaseModel):
    """
    Order line item.

    price is sampled on its own and does not have to match the product's
    catalog price.
    """
    order_id: int = Field(..., ge=1, description="Reference to orders.id")
    product_id: int = Field(..., ge=1, description="Reference to products.id")
    quantity: int = Field(..., ge=MIN_QUANTITY, le=MAX_QUANTITY, description="Units ordered")
    price: float = Field(..., ge=MIN_PRICE, le=MAX_PRICE, description="Unit price at time of order")
