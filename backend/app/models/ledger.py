"""
Ledger entry model for trip advances and expenses.
"""
from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey, Integer, Text, Enum as SQLEnum
from sqlalchemy.orm import relationship
from app.db.base import BaseModel, utc_now
import enum


class LedgerType(str, enum.Enum):
    """Which ledger an entry belongs to; a trip only ever uses one."""
    SELF = "self"
    FLEET = "fleet"


class EntryKind(str, enum.Enum):
    """Advance (paid out before settlement) or expense (reimbursable)."""
    ADVANCE = "advance"
    EXPENSE = "expense"


class LedgerEntry(BaseModel):
    """A single advance or expense recorded against a trip."""
    __tablename__ = "ledger_entries"

    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    ledger = Column(SQLEnum(LedgerType), nullable=False, index=True)
    kind = Column(SQLEnum(EntryKind), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=True)
    reason = Column(String(100), nullable=True)
    category = Column(String(50), nullable=True)
    party = Column(String(20), nullable=True)  # "driver" or "vehicle"
    payment_type = Column(String(30), nullable=True)
    recipient_name = Column(String(100), nullable=True)
    reference_number = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)
    paid_at = Column(DateTime, nullable=False, default=utc_now)

    # Relationships
    trip = relationship("Trip", back_populates="ledger_entries")
