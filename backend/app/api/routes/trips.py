"""
Trip management routes: booking, ledgers, POD progress and receipts.
"""
import logging
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from app.db.session import get_db
from app.models.trip import Trip
from app.models.user import UserRole
from app.models.ledger import LedgerType, EntryKind
from app.schemas.trip import (
    TripCreate, TripUpdate, TripResponse, TripDetailResponse,
    PodStatusUpdate, PodStatusResponse, PodReport, DriverSummaryResponse
)
from app.schemas.ledger import LedgerEntryCreate, LedgerEntryResponse
from app.schemas.settlement import FleetBalance, FleetOwnerStatement, PodAmountMode
from app.services import trip_service, ledger_service, pod_service
from app.services.ledger_service import LedgerError, LedgerEntryNotFoundError
from app.services.pod_service import PodTransitionError
from app.services.settlement_service import (
    compute_fleet_balance, compute_fleet_owner_statement, SettlementValidationError
)
from app.api.routes.users import get_user_or_404
from app.api.routes.vehicles import get_vehicle_or_404

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trips", tags=["trips"])


def get_trip_or_404(trip_id: int, db: Session) -> Trip:
    """Fetch a trip or fail with 404."""
    trip = db.query(Trip).filter(Trip.id == trip_id).first()
    if not trip:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Trip not found"
        )
    return trip


@router.post("", response_model=TripDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_trip(
    trip_data: TripCreate,
    db: Session = Depends(get_db)
):
    """Book a new trip."""
    vehicle = get_vehicle_or_404(trip_data.vehicle_id, db)
    if trip_data.driver_id is not None:
        get_user_or_404(trip_data.driver_id, db, role=UserRole.DRIVER)

    return trip_service.create_trip(db, trip_data, vehicle)


@router.get("", response_model=List[TripDetailResponse])
async def list_trips(
    driver_id: Optional[int] = None,
    fleet_owner_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db)
):
    """List trips, optionally for one driver or fleet owner."""
    query = db.query(Trip)
    if driver_id is not None:
        query = query.filter(Trip.driver_id == driver_id)
    if fleet_owner_id is not None:
        query = query.filter(Trip.fleet_owner_id == fleet_owner_id)
    return query.order_by(Trip.scheduled_date, Trip.id).offset(skip).limit(limit).all()


@router.get("/pod-report", response_model=PodReport)
async def get_pod_report(db: Session = Depends(get_db)):
    """Client loads split into pending and submitted POD."""
    trips = db.query(Trip).order_by(Trip.scheduled_date, Trip.id).all()
    return pod_service.build_pod_report(trips)


@router.get("/fleet-owner/{fleet_owner_id}/statement", response_model=FleetOwnerStatement)
async def get_fleet_owner_statement(
    fleet_owner_id: int,
    mode: PodAmountMode = PodAmountMode.WITH_POD,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Amounts owed to a fleet owner over their trips, with advances paid."""
    get_user_or_404(fleet_owner_id, db, role=UserRole.FLEET_OWNER)
    trips = trip_service.find_fleet_owner_trips(db, fleet_owner_id, start_date, end_date, search)
    if not trips:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No trips found for this fleet owner"
        )

    return compute_fleet_owner_statement(
        [trip_service.snapshot_trip(t) for t in trips], mode, fleet_owner_id
    )


@router.get("/driver/{driver_id}/summary", response_model=DriverSummaryResponse)
async def get_driver_summary(
    driver_id: int,
    db: Session = Depends(get_db)
):
    """Self advances and expenses paid for a driver, trip by trip."""
    driver = get_user_or_404(driver_id, db, role=UserRole.DRIVER)
    trips = db.query(Trip).filter(Trip.driver_id == driver_id).order_by(Trip.scheduled_date, Trip.id).all()
    return trip_service.build_driver_summary(driver, trips)


@router.get("/{trip_id}", response_model=TripDetailResponse)
async def get_trip(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """Get trip details with loads and ledger entries."""
    return get_trip_or_404(trip_id, db)


@router.patch("/{trip_id}", response_model=TripResponse)
async def update_trip(
    trip_id: int,
    trip_data: TripUpdate,
    db: Session = Depends(get_db)
):
    """Update schedule, driver or receipt figures of a trip."""
    trip = get_trip_or_404(trip_id, db)
    updates = trip_data.model_dump(exclude_unset=True)
    if updates.get("driver_id") is not None:
        get_user_or_404(updates["driver_id"], db, role=UserRole.DRIVER)

    for field, value in updates.items():
        setattr(trip, field, value)
    db.commit()
    db.refresh(trip)
    return trip


@router.delete("/{trip_id}")
async def delete_trip(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """Delete a trip with its loads and ledger."""
    trip = get_trip_or_404(trip_id, db)
    db.delete(trip)
    db.commit()
    logger.info(f"Deleted trip {trip.trip_number}")
    return {"success": True, "message": "Trip deleted"}


@router.post(
    "/{trip_id}/ledgers/{ledger}/{kind}",
    response_model=LedgerEntryResponse,
    status_code=status.HTTP_201_CREATED
)
async def add_ledger_entry(
    trip_id: int,
    ledger: LedgerType,
    kind: EntryKind,
    entry_data: LedgerEntryCreate,
    db: Session = Depends(get_db)
):
    """Append an advance or expense to the trip's self or fleet ledger."""
    trip = get_trip_or_404(trip_id, db)
    try:
        return ledger_service.add_entry(db, trip, ledger, kind, entry_data)
    except LedgerError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.delete("/{trip_id}/ledgers/{ledger}/{kind}/{index}", response_model=TripDetailResponse)
async def delete_ledger_entry(
    trip_id: int,
    ledger: LedgerType,
    kind: EntryKind,
    index: int,
    db: Session = Depends(get_db)
):
    """Delete an advance or expense by its position in the trip's list."""
    trip = get_trip_or_404(trip_id, db)
    try:
        ledger_service.delete_entry(db, trip, ledger, kind, index)
    except LedgerError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except LedgerEntryNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    return trip


@router.put("/pod-status/{trip_id}", response_model=PodStatusResponse)
async def update_pod_status(
    trip_id: int,
    update: Optional[PodStatusUpdate] = None,
    db: Session = Depends(get_db)
):
    """Move the trip's POD to its next stage."""
    trip = get_trip_or_404(trip_id, db)
    try:
        trip = pod_service.set_pod_status(db, trip, update.status if update else None)
    except PodTransitionError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    return PodStatusResponse(
        success=True,
        trip_id=trip.id,
        pod_status=trip.pod_status,
        pod_status_date=trip.pod_status_date,
        message=pod_service.POD_STAGE_LABELS[trip.pod_status],
    )


@router.get("/{trip_id}/fleet-receipt", response_model=FleetBalance)
async def get_fleet_receipt(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """Fleet owner receipt figures for a trip."""
    trip = get_trip_or_404(trip_id, db)
    try:
        return compute_fleet_balance(trip_service.snapshot_trip(trip))
    except SettlementValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
