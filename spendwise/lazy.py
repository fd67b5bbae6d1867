from typing import Callable, Dict, Iterable, Iterator, Optional, Tuple

from spendwise.domain import Category, Expense

_CATEGORY_ORDER = {c: i for i, c in enumerate(Category)}


def iter_expenses(
    expenses: Tuple[Expense, ...], pred: Callable[[Expense], bool]
) -> Iterable[Expense]:
    for e in expenses:
        if pred(e):
            yield e


def ranked_categories(totals: Dict[Category, float]) -> Iterator[Tuple[Category, float]]:
    """Categories by total spend, highest first.

    Equal totals keep Category declaration order, so the ranking never depends
    on the order expenses were added in.
    """
    ordered = sorted(totals.items(), key=lambda item: (-item[1], _CATEGORY_ORDER[item[0]]))
    for category, total in ordered:
        yield category, total


def top_category(totals: Dict[Category, float]) -> Optional[Category]:
    return next((c for c, _ in ranked_categories(totals)), None)
