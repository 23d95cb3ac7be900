import calendar
from datetime import date, datetime, timezone
from typing import Any, Iterable, List, Optional

RECENT_MONTHS = 3


def subtract_months(day: date, months: int) -> date:
    """Calendar month rollback, clamping the day to the end of the target month."""
    total = day.year * 12 + (day.month - 1) - months
    year, month_index = divmod(total, 12)
    month = month_index + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def transaction_date(tx: Any) -> Optional[date]:
    if not isinstance(tx, dict):
        return None
    raw = tx.get("date")
    if not isinstance(raw, str) or not raw.strip():
        return None
    value = raw.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        return None


def cutoff_date(months: int = RECENT_MONTHS, now: Optional[datetime] = None) -> date:
    now = now or datetime.now(timezone.utc)
    return subtract_months(now.date(), months)


def filter_recent(
    transactions: Optional[Iterable[Any]],
    months: int = RECENT_MONTHS,
    now: Optional[datetime] = None,
) -> List[Any]:
    """
    Keep transactions dated on or after `now` minus `months` months.

    Order is preserved and the input is not modified. Items without a
    parseable `date` are dropped; future-dated items are kept.
    """
    if transactions is None:
        return []
    cutoff = cutoff_date(months, now)
    out: List[Any] = []
    for tx in transactions:
        d = transaction_date(tx)
        if d is not None and d >= cutoff:
            out.append(tx)
    return out
