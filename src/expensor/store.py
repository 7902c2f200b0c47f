"""
Receipt store: the single owner of the receipt collection.
Keeps the collection in memory and mirrors it to one key-value slot after
every mutation.
"""

import logging
import threading
from typing import Callable, List, Tuple

from .codec import ReceiptDecodeError, ReceiptEncodeError, decode_receipts, encode_receipts
from .models import ChangeEvent, ChangeType, FailureKind, Receipt, StoreResult
from .storage import KeyValueStorage, StorageError

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "SavedReceipts"

Subscriber = Callable[[ChangeEvent], None]


class ReceiptStore:
    """In-memory receipt collection with best-effort persistence."""

    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_STORAGE_KEY):
        """Initialize the store and load the persisted collection.

        Args:
            storage: Initialized key-value storage
            key: Slot holding the encoded collection
        """
        self.storage = storage
        self.key = key
        self.logger = logger
        self._receipts: List[Receipt] = []
        self._subscribers: List[Subscriber] = []
        self._lock = threading.RLock()
        self.last_result: StoreResult = StoreResult.ok()
        self.load()

    @property
    def receipts(self) -> Tuple[Receipt, ...]:
        """Snapshot of the current collection."""
        return self.snapshot()

    def snapshot(self) -> Tuple[Receipt, ...]:
        with self._lock:
            return tuple(self._receipts)

    def __len__(self) -> int:
        with self._lock:
            return len(self._receipts)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a change listener.

        Returns:
            Callable that removes the listener again
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def add(self, receipt: Receipt) -> StoreResult:
        """Append a receipt and persist the collection.

        Identifiers are not checked for uniqueness; a duplicate is logged.
        """
        with self._lock:
            if any(r.identifier == receipt.identifier for r in self._receipts):
                self.logger.debug(f"Adding receipt with duplicate identifier {receipt.identifier}")
            self._receipts.append(receipt)
            result = self._persist(affected=1)
            self.logger.info(f"Added receipt {receipt.identifier} ({receipt.merchant})")
            self._notify(ChangeType.ADDED, result)
            return result

    def update(self, receipt: Receipt) -> StoreResult:
        """Replace the first receipt with the same identifier.

        A missing identifier leaves the collection untouched and is reported
        as NOT_FOUND without persisting.
        """
        with self._lock:
            for index, existing in enumerate(self._receipts):
                if existing.identifier == receipt.identifier:
                    self._receipts[index] = receipt
                    result = self._persist(affected=1)
                    self.logger.info(f"Updated receipt {receipt.identifier}")
                    self._notify(ChangeType.UPDATED, result)
                    return result

            self.logger.warning(f"Receipt {receipt.identifier} not found for update")
            self.last_result = StoreResult.failed(
                FailureKind.NOT_FOUND, f"No receipt with identifier {receipt.identifier}"
            )
            return self.last_result

    def delete(self, receipt: Receipt) -> StoreResult:
        """Remove every receipt sharing the identifier and persist."""
        with self._lock:
            before = len(self._receipts)
            self._receipts = [r for r in self._receipts if r.identifier != receipt.identifier]
            removed = before - len(self._receipts)
            result = self._persist(affected=removed)
            self.logger.info(f"Deleted {removed} receipt(s) with identifier {receipt.identifier}")
            self._notify(ChangeType.DELETED, result)
            return result

    def clear(self) -> StoreResult:
        """Remove every receipt and persist the empty collection."""
        with self._lock:
            removed = len(self._receipts)
            self._receipts = []
            result = self._persist(affected=removed)
            self.logger.info(f"Cleared {removed} receipt(s)")
            self._notify(ChangeType.DELETED, result)
            return result

    def load(self) -> StoreResult:
        """Read the persisted collection, replacing the in-memory one.

        Never raises: an absent slot yields an empty collection, an unreadable
        or undecodable one yields an empty collection and a failed result.
        """
        with self._lock:
            result = self._read()
            self.last_result = result
            self._notify(ChangeType.LOADED, result)
            return result

    reload = load

    def persist(self) -> StoreResult:
        """Write the full collection to storage."""
        with self._lock:
            return self._persist(affected=len(self._receipts))

    def _read(self) -> StoreResult:
        try:
            data = self.storage.get(self.key)
        except StorageError as e:
            self._receipts = []
            self.logger.error(f"Error loading receipts: {str(e)}")
            return StoreResult.failed(FailureKind.READ_FAILED, str(e))

        if data is None:
            self._receipts = []
            self.logger.info(f"No persisted receipts under '{self.key}'")
            return StoreResult.ok()

        try:
            self._receipts = decode_receipts(data)
        except ReceiptDecodeError as e:
            self._receipts = []
            self.logger.error(f"Error loading receipts: {str(e)}")
            return StoreResult.failed(FailureKind.DECODE_FAILED, str(e))

        self.logger.info(f"Loaded {len(self._receipts)} receipts")
        return StoreResult.ok(affected=len(self._receipts))

    def _persist(self, affected: int) -> StoreResult:
        try:
            data = encode_receipts(self._receipts)
        except ReceiptEncodeError as e:
            self.logger.error(f"Error saving receipts: {str(e)}")
            self.last_result = StoreResult.failed(FailureKind.ENCODE_FAILED, str(e), affected)
            return self.last_result

        try:
            self.storage.set(self.key, data)
        except StorageError as e:
            self.logger.error(f"Error saving receipts: {str(e)}")
            self.last_result = StoreResult.failed(FailureKind.WRITE_FAILED, str(e), affected)
            return self.last_result

        self.last_result = StoreResult.ok(affected)
        return self.last_result

    def _notify(self, change: ChangeType, result: StoreResult) -> None:
        if not self._subscribers:
            return
        event = ChangeEvent(type=change, receipts=tuple(self._receipts), result=result)
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception as e:
                self.logger.error(f"Receipt subscriber {callback!r} failed: {str(e)}")
