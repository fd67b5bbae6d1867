import logging
from datetime import date, datetime
from functools import lru_cache
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

# ISO is what we write; M/D/YYYY is what the old browser widget stored.
_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y")


@lru_cache(maxsize=None)
def parse_expense_date(raw: str) -> Optional[date]:
    """Parse a stored expense date, or return None when it can't be read.

    Cached, so an unreadable string is only logged the first time it is seen.
    """
    text = (raw or "").strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    logger.warning("Unparseable expense date %r, excluded from monthly totals", raw)
    return None


def month_key(d: date) -> Tuple[int, int]:
    return d.year, d.month


def previous_month(year: int, month: int) -> Tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def month_label(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"
