"""
Derivation functions over a receipt snapshot.
Filtering, sorting and aggregation used by the receipt views. None of these
functions mutate their input; each returns a new list or value.
"""

from collections import defaultdict
from datetime import date, datetime, tzinfo
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Union

from .models import Receipt, ReceiptFilters, ReceiptSummary

DayLike = Union[date, datetime]


def wall_time(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Naive wall-clock time of value in tz (the local zone when tz is None).

    Naive timestamps are taken as already local. Aware timestamps whose
    conversion would leave the datetime range keep their own wall-clock time.
    """
    if value.tzinfo is None:
        return value
    try:
        return value.astimezone(tz).replace(tzinfo=None)
    except (OverflowError, ValueError, OSError):
        return value.replace(tzinfo=None)


def calendar_day(value: DayLike, tz: Optional[tzinfo] = None) -> date:
    """Calendar day of a date or timestamp, using wall_time for timestamps."""
    if isinstance(value, datetime):
        return wall_time(value, tz).date()
    return value


def filter_by_date(snapshot: Iterable[Receipt], day: DayLike, tz: Optional[tzinfo] = None) -> List[Receipt]:
    """Keep receipts dated on the same calendar day as day."""
    target = calendar_day(day, tz)
    return [r for r in snapshot if calendar_day(r.date, tz) == target]


def filter_by_category(snapshot: Iterable[Receipt], category: str) -> List[Receipt]:
    """Keep receipts whose categories contain category (case-sensitive)."""
    return [r for r in snapshot if category in r.categories]


def filter_by_search_text(snapshot: Iterable[Receipt], text: str) -> List[Receipt]:
    """Keep receipts where merchant, notes or a category contains text.

    Matching is case-insensitive. Empty text keeps everything.
    """
    if not text:
        return list(snapshot)

    needle = text.casefold()
    results = []
    for receipt in snapshot:
        if needle in receipt.merchant.casefold():
            results.append(receipt)
        elif receipt.notes and needle in receipt.notes.casefold():
            results.append(receipt)
        elif any(needle in label.casefold() for label in receipt.categories):
            results.append(receipt)
    return results


def sort_by_date_descending(snapshot: Iterable[Receipt], tz: Optional[tzinfo] = None) -> List[Receipt]:
    """Most recent first. Stable, so equal dates keep their relative order.

    Naive and aware timestamps are compared by their wall_time in tz.
    """
    return sorted(snapshot, key=lambda r: wall_time(r.date, tz), reverse=True)


def total_amount(snapshot: Iterable[Receipt]) -> Decimal:
    return sum((r.amount for r in snapshot), Decimal("0"))


def distinct_dates(snapshot: Iterable[Receipt], tz: Optional[tzinfo] = None) -> List[date]:
    """Distinct calendar days carrying receipts, newest first."""
    return sorted({calendar_day(r.date, tz) for r in snapshot}, reverse=True)


def distinct_categories(snapshot: Iterable[Receipt]) -> List[str]:
    return sorted({label for r in snapshot for label in r.categories})


def expense_count(snapshot: Iterable[Receipt], day: DayLike, tz: Optional[tzinfo] = None) -> int:
    """Number of receipts on a calendar day."""
    return len(filter_by_date(snapshot, day, tz))


def apply_filters(snapshot: Iterable[Receipt], filters: ReceiptFilters,
                  tz: Optional[tzinfo] = None) -> List[Receipt]:
    """Apply date, category and search text filters, then sort.

    The order is fixed: date, category, search text, then most recent first.
    Unset filters are skipped.
    """
    results = list(snapshot)

    if filters.selected_date is not None:
        results = filter_by_date(results, filters.selected_date, tz)

    if filters.category:
        results = filter_by_category(results, filters.category)

    if filters.search_text:
        results = filter_by_search_text(results, filters.search_text)

    return sort_by_date_descending(results, tz)


def summarize(snapshot: Iterable[Receipt], tz: Optional[tzinfo] = None) -> ReceiptSummary:
    """Aggregate count and totals per primary category and per day.

    Receipts without categories are grouped under "Uncategorized".
    """
    receipts = list(snapshot)
    by_category: Dict[str, Decimal] = defaultdict(Decimal)
    by_day: Dict[date, Decimal] = defaultdict(Decimal)

    for receipt in receipts:
        by_category[receipt.primary_category or "Uncategorized"] += receipt.amount
        by_day[calendar_day(receipt.date, tz)] += receipt.amount

    return ReceiptSummary(
        count=len(receipts),
        total_amount=total_amount(receipts),
        by_category=dict(by_category),
        by_day=dict(sorted(by_day.items(), reverse=True)),
    )
