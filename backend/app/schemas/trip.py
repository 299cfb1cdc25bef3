"""
Pydantic schemas for Trip entity.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from app.models.trip import TripStatus, PodStatus
from app.models.vehicle import OwnershipType
from app.schemas.ledger import LedgerEntryResponse
from app.schemas.settlement import LedgerLine


class TripLoadBase(BaseModel):
    """Base schema for a client load on a trip."""
    client_name: str
    description: str
    origin_city: str
    destination_city: str
    weight: Optional[Decimal] = None
    rate: Decimal = Field(default=Decimal(0), ge=0)
    truck_hire_cost: Decimal = Field(default=Decimal(0), ge=0)
    total_rate: Decimal = Field(default=Decimal(0), ge=0)


class TripLoadResponse(TripLoadBase):
    """Schema for trip load response."""
    id: int
    position: int

    class Config:
        from_attributes = True


class TripCreate(BaseModel):
    """Schema for trip creation."""
    scheduled_date: date
    vehicle_id: int
    driver_id: Optional[int] = None
    rate: Decimal = Field(default=Decimal(0), ge=0)
    commission: Decimal = Field(default=Decimal(0), ge=0)
    pod_balance: Decimal = Decimal(0)
    pod_balance_paid: Decimal = Field(default=Decimal(0), ge=0)
    notes: Optional[str] = None
    loads: List[TripLoadBase] = []


class TripUpdate(BaseModel):
    """Schema for trip update."""
    scheduled_date: Optional[date] = None
    driver_id: Optional[int] = None
    rate: Optional[Decimal] = Field(default=None, ge=0)
    commission: Optional[Decimal] = Field(default=None, ge=0)
    pod_balance: Optional[Decimal] = None
    pod_balance_paid: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None


class TripResponse(BaseModel):
    """Schema for trip response."""
    id: int
    trip_number: str
    scheduled_date: date
    vehicle_id: int
    driver_id: Optional[int] = None
    fleet_owner_id: Optional[int] = None
    ownership_type: OwnershipType
    status: TripStatus
    rate: Decimal
    commission: Decimal
    pod_balance: Decimal
    pod_balance_paid: Decimal
    pod_status: PodStatus
    pod_status_date: datetime
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TripDetailResponse(TripResponse):
    """Schema for detailed trip response with loads and ledger."""
    loads: List[TripLoadResponse] = []
    ledger_entries: List[LedgerEntryResponse] = []


class PodStatusUpdate(BaseModel):
    """Schema for moving a trip's POD to a stage; omit to take the next one."""
    status: Optional[PodStatus] = None


class PodStatusResponse(BaseModel):
    """Schema for POD status update response."""
    success: bool
    trip_id: int
    pod_status: PodStatus
    pod_status_date: datetime
    message: str


class DriverTripSummary(BaseModel):
    """Per-trip section of a driver summary."""
    trip_id: int
    trip_number: str
    scheduled_date: date
    vehicle_number: Optional[str] = None
    advances: List[LedgerLine]
    expenses: List[LedgerLine]


class DriverSummaryResponse(BaseModel):
    """Advances and expenses paid for a driver across all trips."""
    driver_id: int
    driver_name: str
    total_trips: int
    total_advances: Decimal
    total_advance_count: int
    total_expenses: Decimal
    total_expense_count: int
    trips: List[DriverTripSummary]


class PodReportRow(BaseModel):
    """One client load on the POD status report."""
    trip_id: int
    trip_number: str
    scheduled_date: date
    vehicle_number: Optional[str] = None
    client_name: str
    origin_city: str
    destination_city: str
    status: PodStatus


class PodReport(BaseModel):
    """Loads still waiting on their POD, and loads whose POD is in."""
    pending: List[PodReportRow]
    submitted: List[PodReportRow]
