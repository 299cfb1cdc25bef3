"""
Pydantic schemas for trip advances and expenses.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from app.models.ledger import LedgerType, EntryKind


class LedgerEntryCreate(BaseModel):
    """Schema for appending an advance or expense to a trip."""
    amount: Decimal = Field(ge=0, max_digits=15, decimal_places=2)
    reason: Optional[str] = None
    category: Optional[str] = None
    party: Optional[str] = None  # "driver" or "vehicle"
    payment_type: Optional[str] = None
    recipient_name: Optional[str] = None
    reference_number: Optional[str] = None
    description: Optional[str] = None
    paid_at: Optional[datetime] = None  # Defaults to now


class LedgerEntryResponse(BaseModel):
    """Schema for ledger entry response."""
    id: int
    trip_id: int
    ledger: LedgerType
    kind: EntryKind
    amount: Optional[Decimal] = None
    reason: Optional[str] = None
    category: Optional[str] = None
    party: Optional[str] = None
    payment_type: Optional[str] = None
    recipient_name: Optional[str] = None
    reference_number: Optional[str] = None
    description: Optional[str] = None
    paid_at: datetime

    class Config:
        from_attributes = True
