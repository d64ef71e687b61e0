"""Helpers for raw and enriched transaction listings."""
from .enriched import (
    EXPENSE,
    INCOME,
    filter_transactions,
    infer_direction,
    summarize_directions,
    unique_categories,
    unique_merchants,
)

__all__ = [
    "INCOME",
    "EXPENSE",
    "infer_direction",
    "summarize_directions",
    "filter_transactions",
    "unique_categories",
    "unique_merchants",
]
