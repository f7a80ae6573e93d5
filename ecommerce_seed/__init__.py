"""Synthetic e-commerce data seeder for query performance experiments."""

__version__ = "0.1.0"
