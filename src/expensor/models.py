"""
Data models using Pydantic for the expense tracker.
Covers the persisted receipt record, the bundled seed schema and the
result/event types exchanged by the store.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional, List, Dict, Tuple
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator


class Receipt(BaseModel):
    """Persisted receipt record."""

    model_config = ConfigDict(populate_by_name=True)

    identifier: UUID = Field(default_factory=uuid4, description="Unique receipt identifier")
    date: datetime = Field(..., description="When the expense happened")
    merchant: str = Field(..., description="Merchant name")
    amount: Decimal = Field(..., description="Amount spent")
    categories: List[str] = Field(default_factory=list, description="Ordered category labels")
    image_url: Optional[str] = Field(None, alias="imageURL", description="Attached receipt image")
    notes: Optional[str] = Field(None, description="Free text notes")

    @field_validator('amount', mode='before')
    @classmethod
    def validate_amount(cls, v):
        """Accept JSON numbers as well as the exact decimal strings written on save.

        Floats are read through their shortest repr so 25.99 stays 25.99.
        """
        if isinstance(v, float):
            return Decimal(repr(v))
        return v

    @property
    def primary_category(self) -> Optional[str]:
        """First category label, if any."""
        return self.categories[0] if self.categories else None


class ReceiptCreate(BaseModel):
    """Model for receipts entered by the user, before an identifier exists."""

    date: datetime = Field(default_factory=datetime.now)
    merchant: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(...)
    categories: List[str] = Field(default_factory=list)
    image_url: Optional[str] = Field(None)
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator('merchant')
    @classmethod
    def validate_merchant(cls, v):
        """Strip whitespace from merchant name."""
        if not v.strip():
            raise ValueError('Merchant name cannot be empty')
        return v.strip()

    @field_validator('categories')
    @classmethod
    def validate_categories(cls, v):
        """Drop blank labels, keep order."""
        return [label.strip() for label in v if label and label.strip()]

    def to_receipt(self) -> Receipt:
        """Build a persisted receipt with a fresh identifier."""
        return Receipt(
            date=self.date,
            merchant=self.merchant,
            amount=self.amount,
            categories=list(self.categories),
            image_url=self.image_url,
            notes=self.notes,
        )


class ReceiptFilters(BaseModel):
    """Model for the filter selection applied to a snapshot."""

    selected_date: Optional[date] = Field(None, description="Keep receipts from this calendar day")
    category: Optional[str] = Field(None, description="Keep receipts carrying this category")
    search_text: str = Field("", description="Case-insensitive text search")

    @field_validator('selected_date', mode='before')
    @classmethod
    def validate_selected_date(cls, v):
        """Reduce a timestamp to its calendar day."""
        if isinstance(v, datetime):
            return v.date()
        return v


class FailureKind(str, Enum):
    """Distinguishable failure kinds reported by the store and loaders."""

    MISSING_RESOURCE = "missing_resource"
    DECODE_FAILED = "decode_failed"
    ENCODE_FAILED = "encode_failed"
    READ_FAILED = "read_failed"
    WRITE_FAILED = "write_failed"
    NOT_FOUND = "not_found"


class StoreResult(BaseModel):
    """Outcome of a store operation."""

    success: bool = Field(..., description="Whether the operation fully succeeded")
    kind: Optional[FailureKind] = Field(None, description="Failure kind when success is False")
    message: Optional[str] = Field(None, description="Human readable failure detail")
    affected: int = Field(0, ge=0, description="Number of receipts touched")

    @classmethod
    def ok(cls, affected: int = 0) -> "StoreResult":
        return cls(success=True, affected=affected)

    @classmethod
    def failed(cls, kind: FailureKind, message: str, affected: int = 0) -> "StoreResult":
        return cls(success=False, kind=kind, message=message, affected=affected)


class ChangeType(str, Enum):
    LOADED = "loaded"
    ADDED = "added"
    UPDATED = "updated"
    DELETED = "deleted"


class ChangeEvent(BaseModel):
    """Notification sent to store subscribers after the collection changes."""

    type: ChangeType
    receipts: Tuple[Receipt, ...] = Field(default_factory=tuple, description="Snapshot after the change")
    result: StoreResult


class ReceiptSummary(BaseModel):
    """Aggregates over a snapshot."""

    count: int = Field(..., ge=0)
    total_amount: Decimal = Field(Decimal("0"))
    by_category: Dict[str, Decimal] = Field(default_factory=dict, description="Totals keyed by primary category")
    by_day: Dict[date, Decimal] = Field(default_factory=dict, description="Totals per calendar day")


# Bundled seed schema. Decoded by its own adapter, never converted into Receipt.

class Company(BaseModel):
    name: str
    cif: Optional[str] = None


class LineItem(BaseModel):
    name: str
    quantity: int
    unit_price: Decimal
    total: Decimal


class Totals(BaseModel):
    total: Decimal
    paid_card: Optional[Decimal] = None
    paid_cash: Optional[Decimal] = None


class BundledReceipt(BaseModel):
    """Receipt as shipped in the bundled seed document."""

    id: Optional[str] = None
    date: Optional[datetime] = None
    company: Company
    items: List[LineItem] = Field(default_factory=list)
    totals: Totals
    taxes: Dict[str, Decimal] = Field(default_factory=dict)

    _fallback_id: str = PrivateAttr(default_factory=lambda: str(uuid4()))

    @property
    def identifier(self) -> str:
        """The document id, or a generated one that is stable for this instance."""
        return self.id or self._fallback_id


class BundledMatch(BaseModel):
    """Search hit over bundled receipts with the fields that matched."""

    receipt: BundledReceipt
    matched_name: bool = False
    matched_item: bool = False
