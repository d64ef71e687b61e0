"""Direction inference and table filters for enriched transactions."""
from typing import Iterable, Optional

from ..schemas.platform import EnrichedTransaction


INCOME = "INCOME"
EXPENSE = "EXPENSE"

_NO_FILTER = {"", "all"}


def infer_direction(tx: EnrichedTransaction) -> str:
    """Explicit INCOME/EXPENSE wins; otherwise positive amounts are income."""
    direction = (tx.direction or "").strip().upper()
    if direction in (INCOME, EXPENSE):
        return direction
    return INCOME if (tx.amount or 0) > 0 else EXPENSE


def summarize_directions(transactions: Iterable[EnrichedTransaction]) -> dict[str, int]:
    summary = {"total": 0, "income": 0, "expense": 0}
    for tx in transactions:
        summary["total"] += 1
        if infer_direction(tx) == INCOME:
            summary["income"] += 1
        else:
            summary["expense"] += 1
    return summary


def _matches_search(tx: EnrichedTransaction, search: str) -> bool:
    needle = search.lower()
    fields = (tx.merchant_name, tx.description_clean, tx.description_raw, tx.category)
    return any(value and needle in value.lower() for value in fields)


def _matches_flag(value: Optional[bool], wanted: Optional[str]) -> bool:
    if wanted is None or wanted in _NO_FILTER:
        return True
    if wanted == "yes":
        return value is True
    if wanted == "no":
        return value is False
    return True


def filter_transactions(
    transactions: Iterable[EnrichedTransaction],
    search: Optional[str] = None,
    category: Optional[str] = None,
    merchant: Optional[str] = None,
    direction: Optional[str] = None,
    salary: Optional[str] = None,
    recurring: Optional[str] = None,
) -> list[EnrichedTransaction]:
    """Apply the enriched table's filters.

    Args:
        search: Case-insensitive substring over merchant, descriptions, category
        category: Exact category ("all" or empty disables)
        merchant: Exact merchant name ("all" or empty disables)
        direction: INCOME or EXPENSE, compared against the inferred direction
        salary: "yes" / "no"
        recurring: "yes" / "no"
    """
    wanted_direction = (direction or "").strip().upper()
    result = []
    for tx in transactions:
        if search and not _matches_search(tx, search):
            continue
        if category not in (None, *_NO_FILTER) and tx.category != category:
            continue
        if merchant not in (None, *_NO_FILTER) and tx.merchant_name != merchant:
            continue
        if wanted_direction not in ("", "ALL") and infer_direction(tx) != wanted_direction:
            continue
        if not _matches_flag(tx.salary, salary):
            continue
        if not _matches_flag(tx.recurring, recurring):
            continue
        result.append(tx)
    return result


def unique_categories(transactions: Iterable[EnrichedTransaction]) -> list[str]:
    return sorted({tx.category for tx in transactions if tx.category})


def unique_merchants(transactions: Iterable[EnrichedTransaction]) -> list[str]:
    return sorted({tx.merchant_name for tx in transactions if tx.merchant_name})
