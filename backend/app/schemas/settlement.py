"""
Pydantic schemas for settlement calculation inputs, results and statements.
"""
import enum
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from app.models.ledger import LedgerType


class LedgerLine(BaseModel):
    """One advance or expense as captured in a trip snapshot."""
    amount: Optional[Decimal] = None
    reason: Optional[str] = None
    category: Optional[str] = None
    party: Optional[str] = None
    payment_type: Optional[str] = None
    reference_number: Optional[str] = None
    description: Optional[str] = None
    paid_at: Optional[datetime] = None


class LoadFreight(BaseModel):
    """Freight figures of one client load, used by the fleet receipt."""
    truck_hire_cost: Optional[Decimal] = None
    total_rate: Optional[Decimal] = None


class TripLedgerSnapshot(BaseModel):
    """A trip and the entries of the single ledger it settles against."""
    trip_id: int
    trip_number: str
    scheduled_date: Optional[date] = None
    vehicle_id: Optional[int] = None
    vehicle_number: Optional[str] = None
    ledger: LedgerType = LedgerType.SELF
    advances: List[LedgerLine] = []
    expenses: List[LedgerLine] = []

    # Fleet receipt figures
    rate: Decimal = Decimal(0)
    commission: Decimal = Decimal(0)
    pod_balance: Decimal = Decimal(0)
    pod_balance_paid: Decimal = Decimal(0)
    loads: List[LoadFreight] = []


class SettlementInput(BaseModel):
    """Manually entered odometer readings, rate and carried balance."""
    old_km: Decimal
    new_km: Decimal
    per_km_rate: Decimal = Field(ge=0)
    previous_balance: Decimal = Decimal(0)  # Negative = debit carried forward
    next_service_km: Optional[Decimal] = None


class SettlementResult(BaseModel):
    """Derived settlement figures plus an echo of the inputs."""
    old_km: Decimal
    new_km: Decimal
    per_km_rate: Decimal
    previous_balance: Decimal
    next_service_km: Optional[Decimal] = None
    total_km: Decimal
    km_value: Decimal
    total_expenses: Decimal
    total_advances: Decimal
    total: Decimal
    due: Decimal
    direction: str


class StatementLine(BaseModel):
    """Flattened statement row for tabular rendering."""
    date: Optional[datetime] = None
    trip_number: str
    amount: Optional[Decimal] = None
    reason: Optional[str] = None
    category: Optional[str] = None
    placeholder: bool = False


class StatementLines(BaseModel):
    """Advances and expenses tables of a statement."""
    advances: List[StatementLine]
    expenses: List[StatementLine]


class KmBlock(BaseModel):
    """Kilometre section of a statement."""
    old_km: Decimal
    new_km: Decimal
    total_km: Decimal
    per_km_rate: Decimal
    km_value: Decimal


class Statement(StatementLines):
    """Everything a printable multi-trip statement needs."""
    company_name: str
    trip_numbers: List[str]
    km_block: KmBlock
    result: SettlementResult
    summary: str


class SettlementPreviewRequest(BaseModel):
    """Schema for computing a settlement without saving it."""
    trip_ids: List[int] = Field(min_length=1)
    old_km: Decimal = Field(max_digits=14, decimal_places=2)
    new_km: Decimal = Field(max_digits=14, decimal_places=2)
    per_km_rate: Decimal = Field(ge=0, max_digits=12, decimal_places=4)
    previous_balance: Decimal = Field(default=Decimal(0), max_digits=15, decimal_places=2)
    next_service_km: Optional[Decimal] = Field(default=None, max_digits=14, decimal_places=2)


class FleetTransaction(BaseModel):
    """Single row of a fleet receipt."""
    date: Optional[datetime] = None
    reference: Optional[str] = None
    description: Optional[str] = None
    amount: Decimal
    type: str  # "advance" or "expense"


class FleetBalance(BaseModel):
    """Fleet owner receipt figures for one trip."""
    trip_id: int
    trip_number: str
    freight: Decimal
    total_expenses: Decimal
    freight_with_expenses: Decimal
    total_paid: Decimal
    pod_balance: Decimal
    commission: Decimal
    net_balance: Decimal
    direction: str
    transactions: List[FleetTransaction] = []


class PodAmountMode(str, enum.Enum):
    """Whether a fleet owner statement counts the POD balance as payable now."""
    WITH_POD = "with_pod"
    WITHOUT_POD = "without_pod"


class FleetOwnerTripRow(BaseModel):
    """One trip on a fleet owner statement."""
    trip_id: int
    trip_number: str
    scheduled_date: Optional[date] = None
    amount: Decimal
    pod_balance: Decimal
    pod_pending: Decimal
    advances_total: Decimal


class FleetOwnerAdvanceRow(BaseModel):
    """A fleet advance merged with the trip it was paid against."""
    trip_id: int
    trip_number: str
    scheduled_date: Optional[date] = None
    paid_at: Optional[datetime] = None
    amount: Decimal
    reason: Optional[str] = None
    payment_type: Optional[str] = None


class FleetOwnerSummary(BaseModel):
    """Totals across every trip on a fleet owner statement."""
    total_amount: Decimal
    total_advances_paid: Decimal
    total_pending: Decimal
    total_pod: Decimal
    total_pod_pending: Decimal


class FleetOwnerStatement(BaseModel):
    """Multi-trip statement of what is owed to a fleet owner."""
    fleet_owner_id: Optional[int] = None
    mode: PodAmountMode
    summary: FleetOwnerSummary
    trips: List[FleetOwnerTripRow]
    advances: List[FleetOwnerAdvanceRow]
