"""
Receipt storage and query core for the expense tracker.
"""

from .models import Receipt, ReceiptCreate, ReceiptFilters, StoreResult, FailureKind, BundledReceipt
from .storage import KeyValueStorage
from .store import ReceiptStore
from .seed import BundledReceiptLoader
from .browser import ReceiptBrowser
from .config import Settings, get_settings, configure_logging, build_store, build_seed_loader

__all__ = [
    'Receipt',
    'ReceiptCreate',
    'ReceiptFilters',
    'StoreResult',
    'FailureKind',
    'BundledReceipt',
    'KeyValueStorage',
    'ReceiptStore',
    'BundledReceiptLoader',
    'ReceiptBrowser',
    'Settings',
    'get_settings',
    'configure_logging',
    'build_store',
    'build_seed_loader'
]
