"""
Unit tests for the receipt browser filter state.
"""

import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal

from expensor.browser import ReceiptBrowser
from expensor.models import ChangeType, Receipt
from expensor.storage import KeyValueStorage
from expensor.store import ReceiptStore


@pytest.fixture
def store(tmp_path):
    storage = KeyValueStorage(tmp_path / "receipts.db")
    storage.initialize()
    store = ReceiptStore(storage)

    today = datetime(2024, 3, 10, 12, 0)
    store.add(Receipt(date=today, merchant="Grocery Store", amount=Decimal("125.50"),
                      categories=["Groceries", "Food"], notes="Weekly groceries"))
    store.add(Receipt(date=today - timedelta(days=1), merchant="Gas Station", amount=Decimal("200.00"),
                      categories=["Transportation", "Car"], notes="Full tank"))
    store.add(Receipt(date=today - timedelta(days=2), merchant="Restaurant", amount=Decimal("85.00"),
                      categories=["Food", "Entertainment"], notes="Dinner with friends"))
    return store


@pytest.fixture
def browser(store):
    return ReceiptBrowser(store)


class TestReceiptBrowser:
    """Test cases for ReceiptBrowser class."""

    def test_unfiltered_view(self, browser):
        assert [r.merchant for r in browser.filtered_receipts] == [
            "Grocery Store", "Gas Station", "Restaurant"
        ]
        assert browser.total_expenses == Decimal("410.50")

    def test_toggle_date_selects_and_clears(self, browser):
        assert browser.toggle_date(datetime(2024, 3, 9, 8, 30)) == date(2024, 3, 9)
        assert [r.merchant for r in browser.filtered_receipts] == ["Gas Station"]
        assert browser.total_expenses == Decimal("200.00")

        assert browser.toggle_date(date(2024, 3, 9)) is None
        assert len(browser.filtered_receipts) == 3

    def test_toggle_other_date_switches(self, browser):
        browser.toggle_date(date(2024, 3, 9))
        assert browser.toggle_date(date(2024, 3, 8)) == date(2024, 3, 8)

    def test_category_and_search(self, browser):
        browser.select_category("Food")
        assert [r.merchant for r in browser.filtered_receipts] == ["Grocery Store", "Restaurant"]

        browser.search("dinner")
        assert [r.merchant for r in browser.filtered_receipts] == ["Restaurant"]
        assert browser.total_expenses == Decimal("85.00")

    def test_reset(self, browser):
        browser.toggle_date(date(2024, 3, 9))
        browser.select_category("Car")
        browser.search("tank")

        browser.reset()

        assert browser.filters.selected_date is None
        assert browser.filters.category is None
        assert browser.filters.search_text == ""
        assert len(browser.filtered_receipts) == 3

    def test_derived_lists(self, browser):
        assert browser.unique_dates == [date(2024, 3, 10), date(2024, 3, 9), date(2024, 3, 8)]
        assert browser.all_categories == ["Car", "Entertainment", "Food", "Groceries", "Transportation"]

    def test_expense_count_ignores_filters(self, browser):
        browser.select_category("Car")
        assert browser.expense_count(date(2024, 3, 10)) == 1

    def test_primary_category(self, browser):
        first = browser.filtered_receipts[0]
        assert browser.primary_category(first) == "Groceries"

    def test_reflects_store_changes(self, store, browser):
        events = []
        browser.subscribe(events.append)

        store.add(Receipt(date=datetime(2024, 3, 11, 9, 0), merchant="Bakery", amount=Decimal("4.50")))

        assert events[0].type == ChangeType.ADDED
        assert browser.filtered_receipts[0].merchant == "Bakery"
        assert browser.total_expenses == Decimal("415.00")
