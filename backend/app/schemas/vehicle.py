"""
Pydantic schemas for Vehicle entity.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from app.models.vehicle import OwnershipType


class VehicleBase(BaseModel):
    """Base vehicle schema."""
    registration_number: str
    model: Optional[str] = None
    ownership_type: OwnershipType = OwnershipType.SELF
    owner_id: Optional[int] = None  # Required for fleet owner vehicles
    current_km: Decimal = Field(default=Decimal(0), max_digits=14, decimal_places=2)
    next_service_km: Optional[Decimal] = Field(default=None, max_digits=14, decimal_places=2)


class VehicleCreate(VehicleBase):
    """Schema for vehicle creation."""
    pass


class VehicleResponse(VehicleBase):
    """Schema for vehicle response."""
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
