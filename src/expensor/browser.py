"""
Receipt browser: the filter selection shown by the receipt screens.
Holds the selected day, category and search text and derives the visible
list from a store handed in by the caller.
"""

import logging
from datetime import date, datetime, tzinfo
from decimal import Decimal
from typing import Callable, List, Optional, Union

from .models import ChangeEvent, Receipt, ReceiptFilters
from .query import (
    apply_filters,
    calendar_day,
    distinct_categories,
    distinct_dates,
    expense_count,
    total_amount,
)
from .store import ReceiptStore

logger = logging.getLogger(__name__)


class ReceiptBrowser:
    """Filter state over a ReceiptStore."""

    def __init__(self, store: ReceiptStore, tz: Optional[tzinfo] = None):
        self.store = store
        self.tz = tz
        self.selected_date: Optional[date] = None
        self.selected_category: Optional[str] = None
        self.search_text: str = ""
        self.logger = logger

    @property
    def filters(self) -> ReceiptFilters:
        return ReceiptFilters(
            selected_date=self.selected_date,
            category=self.selected_category,
            search_text=self.search_text,
        )

    @property
    def filtered_receipts(self) -> List[Receipt]:
        return apply_filters(self.store.snapshot(), self.filters, self.tz)

    @property
    def total_expenses(self) -> Decimal:
        """Total of the receipts currently visible."""
        return total_amount(self.filtered_receipts)

    @property
    def unique_dates(self) -> List[date]:
        return distinct_dates(self.store.snapshot(), self.tz)

    @property
    def all_categories(self) -> List[str]:
        return distinct_categories(self.store.snapshot())

    def toggle_date(self, day: Union[date, datetime]) -> Optional[date]:
        """Select a day, or clear the selection when it is already selected.

        Returns:
            The selected day after the toggle
        """
        normalized = calendar_day(day, self.tz)
        if self.selected_date == normalized:
            self.selected_date = None
        else:
            self.selected_date = normalized
        self.logger.debug(f"Date filter set to {self.selected_date}")
        return self.selected_date

    def select_category(self, category: Optional[str]) -> None:
        self.selected_category = category

    def search(self, text: str) -> None:
        self.search_text = text

    def reset(self) -> None:
        """Clear every filter."""
        self.selected_date = None
        self.selected_category = None
        self.search_text = ""

    def expense_count(self, day: Union[date, datetime]) -> int:
        """Receipts on a day, ignoring the current filters."""
        return expense_count(self.store.snapshot(), day, self.tz)

    @staticmethod
    def primary_category(receipt: Receipt) -> Optional[str]:
        return receipt.primary_category

    def subscribe(self, callback: Callable[[ChangeEvent], None]) -> Callable[[], None]:
        """Listen to changes of the underlying store."""
        return self.store.subscribe(callback)
