"""
Trip service for booking trips and turning them into ledger snapshots.
"""
import logging
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from app.models.trip import Trip, TripLoad
from app.models.vehicle import Vehicle, OwnershipType
from app.models.ledger import LedgerEntry, LedgerType, EntryKind
from app.models.user import User
from app.schemas.trip import TripCreate, DriverSummaryResponse, DriverTripSummary
from app.schemas.settlement import LedgerLine, LoadFreight, TripLedgerSnapshot
from app.services.settlement_service import totals_by_ledger

logger = logging.getLogger(__name__)

DRIVER_PARTY = "driver"


def ledger_for(ownership_type: OwnershipType) -> LedgerType:
    """Self-owned vehicles use the self ledger, hired ones the fleet ledger."""
    if ownership_type == OwnershipType.FLEET_OWNER:
        return LedgerType.FLEET
    return LedgerType.SELF


def next_trip_number(db: Session, on: Optional[date] = None) -> str:
    """
    Generate the next trip number for the month, e.g. TRP25090007.

    The sequence is zero-padded to four digits and restarts every month;
    it keeps counting past 9999, so the latest trip is found by id.
    """
    on = on or date.today()
    prefix = f"TRP{on.strftime('%y%m')}"
    last = db.query(Trip.trip_number).filter(
        Trip.trip_number.like(f"{prefix}%")
    ).order_by(Trip.id.desc()).first()

    sequence = 1
    if last:
        sequence = int(last[0][len(prefix):]) + 1
    return f"{prefix}{sequence:04d}"


def create_trip(db: Session, trip_data: TripCreate, vehicle: Vehicle) -> Trip:
    """Book a trip, copying ownership from the vehicle."""
    trip = Trip(
        trip_number=next_trip_number(db),
        scheduled_date=trip_data.scheduled_date,
        vehicle_id=vehicle.id,
        driver_id=trip_data.driver_id,
        ownership_type=vehicle.ownership_type,
        fleet_owner_id=vehicle.owner_id if vehicle.ownership_type == OwnershipType.FLEET_OWNER else None,
        rate=trip_data.rate,
        commission=trip_data.commission,
        pod_balance=trip_data.pod_balance,
        pod_balance_paid=trip_data.pod_balance_paid,
        notes=trip_data.notes,
    )
    for position, load in enumerate(trip_data.loads):
        trip.loads.append(TripLoad(position=position, **load.model_dump()))

    db.add(trip)
    db.commit()
    db.refresh(trip)
    logger.info(f"Booked trip {trip.trip_number} on vehicle {vehicle.registration_number}")
    return trip


def _line(entry: LedgerEntry) -> LedgerLine:
    return LedgerLine(
        amount=entry.amount,
        reason=entry.reason,
        category=entry.category,
        party=entry.party,
        payment_type=entry.payment_type,
        reference_number=entry.reference_number,
        description=entry.description,
        paid_at=entry.paid_at,
    )


def snapshot_trip(trip: Trip, party: Optional[str] = None) -> TripLedgerSnapshot:
    """
    Capture a trip with the entries of its own ledger only.

    When party is given only entries paid for that party are kept.
    """
    ledger = ledger_for(trip.ownership_type)
    entries = [
        e for e in trip.ledger_entries
        if e.ledger == ledger and (party is None or (e.party or "").lower() == party)
    ]
    return TripLedgerSnapshot(
        trip_id=trip.id,
        trip_number=trip.trip_number,
        scheduled_date=trip.scheduled_date,
        vehicle_id=trip.vehicle_id,
        vehicle_number=trip.vehicle.registration_number if trip.vehicle else None,
        ledger=ledger,
        advances=[_line(e) for e in entries if e.kind == EntryKind.ADVANCE],
        expenses=[_line(e) for e in entries if e.kind == EntryKind.EXPENSE],
        rate=trip.rate,
        commission=trip.commission,
        pod_balance=trip.pod_balance,
        pod_balance_paid=trip.pod_balance_paid,
        loads=[
            LoadFreight(truck_hire_cost=load.truck_hire_cost, total_rate=load.total_rate)
            for load in trip.loads
        ],
    )


def get_trips_by_ids(db: Session, trip_ids: List[int]) -> List[Trip]:
    """Load trips keeping the caller's order; raises LookupError on unknown ids."""
    trips = db.query(Trip).filter(Trip.id.in_(trip_ids)).all()
    by_id = {t.id: t for t in trips}
    missing = [str(trip_id) for trip_id in trip_ids if trip_id not in by_id]
    if missing:
        raise LookupError(f"Trips not found: {', '.join(missing)}")
    return [by_id[trip_id] for trip_id in trip_ids]


def find_fleet_owner_trips(
    db: Session,
    fleet_owner_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    search: Optional[str] = None
) -> List[Trip]:
    """Trips hired from a fleet owner, optionally within dates or matching a search term."""
    query = db.query(Trip).filter(Trip.fleet_owner_id == fleet_owner_id)
    if start_date is not None:
        query = query.filter(Trip.scheduled_date >= start_date)
    if end_date is not None:
        query = query.filter(Trip.scheduled_date <= end_date)
    if search:
        pattern = f"%{search}%"
        query = query.join(Trip.vehicle).filter(or_(
            Trip.trip_number.ilike(pattern),
            Vehicle.registration_number.ilike(pattern),
        ))
    return query.order_by(Trip.scheduled_date, Trip.id).all()


def build_driver_summary(driver: User, trips: List[Trip]) -> DriverSummaryResponse:
    """Self ledger advances and expenses paid for the driver, trip by trip."""
    snapshots = [snapshot_trip(t, party=DRIVER_PARTY) for t in trips if t.ownership_type == OwnershipType.SELF]
    totals = totals_by_ledger(snapshots)

    return DriverSummaryResponse(
        driver_id=driver.id,
        driver_name=driver.name,
        total_trips=len(snapshots),
        total_advances=totals["total_advances"],
        total_advance_count=sum(len(s.advances) for s in snapshots),
        total_expenses=totals["total_expenses"],
        total_expense_count=sum(len(s.expenses) for s in snapshots),
        trips=[
            DriverTripSummary(
                trip_id=s.trip_id,
                trip_number=s.trip_number,
                scheduled_date=s.scheduled_date,
                vehicle_number=s.vehicle_number,
                advances=s.advances,
                expenses=s.expenses,
            )
            for s in snapshots
        ],
    )
