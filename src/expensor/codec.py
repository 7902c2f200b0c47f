"""
JSON encoding and decoding for receipt collections.
Two input formats are supported, each with its own adapter: the persisted
receipt blob and the bundled seed document.
"""

import logging
from typing import List, Union

from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from .models import Receipt, BundledReceipt

logger = logging.getLogger(__name__)

_receipts_adapter = TypeAdapter(List[Receipt])
_bundled_adapter = TypeAdapter(List[BundledReceipt])


class DecodeIssue(BaseModel):
    """Single problem found while decoding a document."""

    location: str
    message: str

    def __str__(self) -> str:
        return f"{self.location}: {self.message}" if self.location else self.message


class ReceiptDecodeError(Exception):
    """Raised when a document cannot be decoded into receipts."""

    def __init__(self, source: str, issues: List[DecodeIssue]):
        self.source = source
        self.issues = issues
        details = "; ".join(str(issue) for issue in issues[:5])
        if len(issues) > 5:
            details += f" (+{len(issues) - 5} more)"
        super().__init__(f"Could not decode {source}: {details}")


class ReceiptEncodeError(Exception):
    """Raised when a receipt collection cannot be serialized."""


def _issues_from(error: ValidationError) -> List[DecodeIssue]:
    issues = []
    for err in error.errors():
        location = ".".join(str(part) for part in err.get("loc", ()))
        issues.append(DecodeIssue(location=location, message=err.get("msg", "invalid value")))
    return issues


def encode_receipts(receipts: List[Receipt]) -> bytes:
    """Serialize the full collection to the persisted blob format.

    Raises:
        ReceiptEncodeError: If any receipt cannot be serialized
    """
    try:
        return _receipts_adapter.dump_json(list(receipts), by_alias=True)
    except (PydanticSerializationError, ValueError, TypeError) as e:
        raise ReceiptEncodeError(f"Could not encode {len(receipts)} receipts: {e}") from e


def decode_receipts(data: Union[bytes, str]) -> List[Receipt]:
    """Decode a persisted blob.

    Raises:
        ReceiptDecodeError: If the blob is not valid JSON or does not match
            the receipt schema
    """
    try:
        return _receipts_adapter.validate_json(data)
    except ValidationError as e:
        raise ReceiptDecodeError("persisted receipts", _issues_from(e)) from e


def decode_bundled_receipts(data: Union[bytes, str], source: str = "bundled receipts") -> List[BundledReceipt]:
    """Decode a bundled seed document.

    Raises:
        ReceiptDecodeError: If the document does not match the bundled schema
    """
    try:
        return _bundled_adapter.validate_json(data)
    except ValidationError as e:
        raise ReceiptDecodeError(source, _issues_from(e)) from e
