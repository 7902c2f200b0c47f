"""
Bundled seed data: loading and querying receipts shipped with the app.
The bundled document uses its own schema (company, items, totals, taxes) and
is never converted into persisted receipts.
"""

import logging
from decimal import Decimal
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from pydantic import BaseModel, Field

from .codec import ReceiptDecodeError, decode_bundled_receipts
from .models import BundledMatch, BundledReceipt, FailureKind

logger = logging.getLogger(__name__)

DEFAULT_CANDIDATES = ("data.json", "mock.json", "data/mock.json")


class BundledLoadResult(BaseModel):
    """Outcome of loading the bundled document."""

    success: bool = Field(..., description="Whether a candidate decoded")
    receipts: List[BundledReceipt] = Field(default_factory=list)
    source: Optional[str] = Field(None, description="Candidate that was decoded")
    kind: Optional[FailureKind] = Field(None, description="Failure kind when nothing decoded")
    errors: List[str] = Field(default_factory=list, description="Per-candidate problems")


class BundledReceiptLoader:
    """Loads the bundled document from an ordered list of candidate paths."""

    def __init__(self, candidates: Sequence[Union[str, Path]] = DEFAULT_CANDIDATES,
                 resource_dir: Union[str, Path] = "."):
        """Initialize the loader.

        Args:
            candidates: Paths tried in order; relative ones resolve against resource_dir
            resource_dir: Root directory for relative candidates
        """
        root = Path(resource_dir)
        self.candidates = [Path(c) if Path(c).is_absolute() else root / c for c in candidates]
        self.logger = logger

    def load(self) -> BundledLoadResult:
        """Return the first candidate that decodes.

        Missing candidates are skipped; undecodable ones are logged and
        skipped. Never raises.
        """
        errors = []
        found_any = False

        for path in self.candidates:
            if not path.is_file():
                self.logger.debug(f"Bundled receipts not found at {path}")
                continue

            found_any = True
            try:
                receipts = decode_bundled_receipts(path.read_bytes(), source=str(path))
            except OSError as e:
                self.logger.error(f"Error reading {path}: {str(e)}")
                errors.append(f"{path}: {e}")
                continue
            except ReceiptDecodeError as e:
                self.logger.error(f"Error decoding bundled receipts: {str(e)}")
                errors.append(str(e))
                continue

            self.logger.info(f"Loaded {len(receipts)} bundled receipts from {path}")
            return BundledLoadResult(success=True, receipts=receipts, source=str(path), errors=errors)

        if not found_any:
            searched = ", ".join(str(p) for p in self.candidates)
            self.logger.error(f"Bundled receipts not found (searched: {searched})")
            return BundledLoadResult(
                success=False,
                kind=FailureKind.MISSING_RESOURCE,
                errors=[f"Not found: {searched}"],
            )

        return BundledLoadResult(success=False, kind=FailureKind.DECODE_FAILED, errors=errors)


def search_bundled(receipts: Iterable[BundledReceipt], text: str) -> List[BundledMatch]:
    """Match company name or item names, case-insensitively.

    Empty text returns every receipt with match flags cleared.
    """
    if not text:
        return [BundledMatch(receipt=r) for r in receipts]

    needle = text.casefold()
    matches = []
    for receipt in receipts:
        matched_name = needle in receipt.company.name.casefold()
        matched_item = any(needle in item.name.casefold() for item in receipt.items)
        if matched_name or matched_item:
            matches.append(BundledMatch(receipt=receipt, matched_name=matched_name, matched_item=matched_item))
    return matches


def bundled_total(receipts: Iterable[BundledReceipt]) -> Decimal:
    """Sum of receipt totals."""
    return sum((r.totals.total for r in receipts), Decimal("0"))
