"""
Trip model for booked truck trips and their client loads.
"""
from sqlalchemy import Column, String, Date, DateTime, Numeric, Text, Enum as SQLEnum, ForeignKey, Integer
from sqlalchemy.orm import relationship
from app.db.base import BaseModel, utc_now
from app.models.vehicle import OwnershipType
import enum


class TripStatus(str, enum.Enum):
    """Trip status enumeration."""
    BOOKED = "booked"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    BILLED = "billed"
    PAID = "paid"


class PodStatus(str, enum.Enum):
    """Proof-of-delivery stages, in their only allowed order."""
    STARTED = "started"
    COMPLETE = "complete"
    POD_RECEIVED = "pod_received"
    POD_SUBMITTED = "pod_submitted"
    SETTLED = "settled"


class Trip(BaseModel):
    """Trip model representing one vehicle run carrying one or more client loads."""
    __tablename__ = "trips"

    trip_number = Column(String(20), unique=True, nullable=False, index=True)
    scheduled_date = Column(Date, nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False, index=True)
    driver_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    fleet_owner_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    ownership_type = Column(SQLEnum(OwnershipType), nullable=False, default=OwnershipType.SELF)
    status = Column(SQLEnum(TripStatus), nullable=False, default=TripStatus.BOOKED, index=True)

    # Fleet receipt figures
    rate = Column(Numeric(15, 2), nullable=False, default=0)
    commission = Column(Numeric(15, 2), nullable=False, default=0)
    pod_balance = Column(Numeric(15, 2), nullable=False, default=0)  # Entered by the office, not derived
    pod_balance_paid = Column(Numeric(15, 2), nullable=False, default=0)

    pod_status = Column(SQLEnum(PodStatus), nullable=False, default=PodStatus.STARTED)
    pod_status_date = Column(DateTime, nullable=False, default=utc_now)
    notes = Column(Text, nullable=True)

    # Relationships
    vehicle = relationship("Vehicle", back_populates="trips")
    driver = relationship("User", foreign_keys=[driver_id], back_populates="driven_trips")
    fleet_owner = relationship("User", foreign_keys=[fleet_owner_id])
    loads = relationship(
        "TripLoad", back_populates="trip", cascade="all, delete-orphan", order_by="TripLoad.position"
    )
    ledger_entries = relationship(
        "LedgerEntry", back_populates="trip", cascade="all, delete-orphan", order_by="LedgerEntry.id"
    )


class TripLoad(BaseModel):
    """A client's load assigned to a trip."""
    __tablename__ = "trip_loads"

    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    client_name = Column(String(100), nullable=False)
    description = Column(String(255), nullable=False)
    origin_city = Column(String(100), nullable=False)
    destination_city = Column(String(100), nullable=False)
    weight = Column(Numeric(12, 2), nullable=True)
    rate = Column(Numeric(15, 2), nullable=False, default=0)
    truck_hire_cost = Column(Numeric(15, 2), nullable=False, default=0)
    total_rate = Column(Numeric(15, 2), nullable=False, default=0)

    # Relationships
    trip = relationship("Trip", back_populates="loads")
