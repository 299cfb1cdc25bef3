"""Models package - Import all models for SQLAlchemy registration."""
from app.models.user import User, UserRole
from app.models.vehicle import Vehicle, OwnershipType
from app.models.trip import Trip, TripLoad, TripStatus, PodStatus
from app.models.ledger import LedgerEntry, LedgerType, EntryKind
from app.models.calculation import DriverCalculation

__all__ = [
    "User",
    "UserRole",
    "Vehicle",
    "OwnershipType",
    "Trip",
    "TripLoad",
    "TripStatus",
    "PodStatus",
    "LedgerEntry",
    "LedgerType",
    "EntryKind",
    "DriverCalculation",
]
