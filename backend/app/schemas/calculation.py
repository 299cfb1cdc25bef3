"""
Pydantic schemas for saved driver calculations.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from app.schemas.settlement import TripLedgerSnapshot


class CalculationUpdate(BaseModel):
    """Schema for editing a calculation; trips come from its snapshot."""
    old_km: Decimal = Field(max_digits=14, decimal_places=2)
    new_km: Decimal = Field(max_digits=14, decimal_places=2)
    per_km_rate: Decimal = Field(ge=0, max_digits=12, decimal_places=4)
    previous_balance: Decimal = Field(default=Decimal(0), max_digits=15, decimal_places=2)
    next_service_km: Optional[Decimal] = Field(default=None, max_digits=14, decimal_places=2)


class CalculationCreate(CalculationUpdate):
    """Schema for saving a new multi-trip calculation for a driver or fleet owner."""
    driver_id: int
    trip_ids: List[int] = Field(min_length=1)


class CalculationResponse(BaseModel):
    """Schema for calculation response."""
    id: int
    driver_id: int
    trip_ids: List[int]
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
    original_trip_data: List[TripLedgerSnapshot]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
