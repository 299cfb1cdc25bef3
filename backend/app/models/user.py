"""
User model for drivers, fleet owners, clients and office staff.
"""
from sqlalchemy import Column, String, Boolean, Enum as SQLEnum
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
import enum


class UserRole(str, enum.Enum):
    """User role enumeration."""
    DRIVER = "driver"
    FLEET_OWNER = "fleet_owner"
    CLIENT = "client"
    ADMIN = "admin"


class User(BaseModel):
    """A person the operator deals with; drivers and fleet owners get settled."""
    __tablename__ = "users"

    name = Column(String(100), nullable=False, index=True)
    phone = Column(String(20), nullable=True)
    email = Column(String(100), unique=True, nullable=True, index=True)
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.DRIVER, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    driven_trips = relationship("Trip", foreign_keys="Trip.driver_id", back_populates="driver")
    owned_vehicles = relationship("Vehicle", back_populates="owner")
    calculations = relationship("DriverCalculation", back_populates="driver", cascade="all, delete-orphan")
