"""
Vehicle model.
"""
from sqlalchemy import Column, String, Numeric, ForeignKey, Integer, Enum as SQLEnum
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
import enum


class OwnershipType(str, enum.Enum):
    """Who owns the vehicle, which decides the ledger its trips use."""
    SELF = "self"
    FLEET_OWNER = "fleet_owner"


class Vehicle(BaseModel):
    """A truck or tempo, either self-owned or hired from a fleet owner."""
    __tablename__ = "vehicles"

    registration_number = Column(String(20), unique=True, nullable=False, index=True)
    model = Column(String(100), nullable=True)
    ownership_type = Column(SQLEnum(OwnershipType), nullable=False, default=OwnershipType.SELF)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    current_km = Column(Numeric(14, 2), nullable=False, default=0)
    next_service_km = Column(Numeric(14, 2), nullable=True)

    # Relationships
    owner = relationship("User", back_populates="owned_vehicles")
    trips = relationship("Trip", back_populates="vehicle")
