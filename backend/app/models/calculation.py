"""
Driver calculation model storing saved multi-trip settlements.
"""
from sqlalchemy import Column, ForeignKey, Integer, JSON, Numeric
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class DriverCalculation(BaseModel):
    """Snapshot of a settlement result and the trips it covers."""
    __tablename__ = "driver_calculations"

    driver_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    trip_ids = Column(JSON, nullable=False)  # List of trip ids covered

    # Inputs, at the precision the API accepts
    old_km = Column(Numeric(14, 2), nullable=False)
    new_km = Column(Numeric(14, 2), nullable=False)
    per_km_rate = Column(Numeric(12, 4), nullable=False)
    previous_balance = Column(Numeric(15, 2), nullable=False, default=0)
    next_service_km = Column(Numeric(14, 2), nullable=True)

    # Derived; km_value carries km (2) + rate (4) decimal places
    total_km = Column(Numeric(14, 2), nullable=False)
    km_value = Column(Numeric(20, 6), nullable=False)
    total_expenses = Column(Numeric(15, 2), nullable=False)
    total_advances = Column(Numeric(15, 2), nullable=False)
    total = Column(Numeric(20, 6), nullable=False)
    due = Column(Numeric(20, 6), nullable=False)

    original_trip_data = Column(JSON, nullable=False)  # Trips and ledgers as they were when saved

    # Relationships
    driver = relationship("User", back_populates="calculations")
