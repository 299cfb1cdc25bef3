"""
Driver calculation routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from app.core.utils import format_response
from app.db.session import get_db
from app.models.calculation import DriverCalculation
from app.models.ledger import LedgerType
from app.models.user import UserRole
from app.schemas.calculation import CalculationCreate, CalculationUpdate, CalculationResponse
from app.schemas.settlement import SettlementInput, Statement
from app.services import calculation_service, trip_service
from app.services.calculation_service import CalculationNotFoundError
from app.services.settlement_service import (
    build_statement, compute_settlement, SettlementValidationError
)
from app.api.routes.users import get_user_or_404

router = APIRouter(prefix="/calculations", tags=["calculations"])

# Who gets settled and the ledger their trips settle against
SETTLED_LEDGERS = {
    UserRole.DRIVER: LedgerType.SELF,
    UserRole.FLEET_OWNER: LedgerType.FLEET,
}


def _load_calculation(calculation_id: int, db: Session) -> DriverCalculation:
    try:
        return calculation_service.get_calculation(db, calculation_id)
    except CalculationNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )


@router.post("", response_model=CalculationResponse, status_code=status.HTTP_201_CREATED)
async def create_calculation(
    calculation_data: CalculationCreate,
    db: Session = Depends(get_db)
):
    """Compute and save a multi-trip calculation for a driver or fleet owner."""
    party = get_user_or_404(calculation_data.driver_id, db)
    if party.role not in SETTLED_LEDGERS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"User {party.name} is not a driver or fleet owner"
        )
    try:
        trips = trip_service.get_trips_by_ids(db, calculation_data.trip_ids)
    except LookupError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )

    snapshots = [trip_service.snapshot_trip(t) for t in trips]
    settlement_input = SettlementInput(
        **calculation_data.model_dump(exclude={"driver_id", "trip_ids"})
    )
    try:
        result = compute_settlement(snapshots, settlement_input, SETTLED_LEDGERS[party.role])
    except SettlementValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    calculation = calculation_service.save_or_update_calculation(
        db, result, snapshots, driver_id=calculation_data.driver_id
    )
    return calculation_service.to_response(calculation)


@router.get("", response_model=List[CalculationResponse])
async def list_calculations(db: Session = Depends(get_db)):
    """List every saved calculation."""
    calculations = db.query(DriverCalculation).order_by(DriverCalculation.created_at.desc()).all()
    return [calculation_service.to_response(c) for c in calculations]


@router.get("/driver/{driver_id}", response_model=List[CalculationResponse])
async def list_driver_calculations(
    driver_id: int,
    db: Session = Depends(get_db)
):
    """Saved calculations of one driver, newest first."""
    get_user_or_404(driver_id, db)
    calculations = calculation_service.list_calculations_for_driver(db, driver_id)
    return [calculation_service.to_response(c) for c in calculations]


@router.get("/{calculation_id}", response_model=CalculationResponse)
async def get_calculation(
    calculation_id: int,
    db: Session = Depends(get_db)
):
    """Get a saved calculation."""
    return calculation_service.to_response(_load_calculation(calculation_id, db))


@router.patch("/{calculation_id}", response_model=CalculationResponse)
async def update_calculation(
    calculation_id: int,
    calculation_data: CalculationUpdate,
    db: Session = Depends(get_db)
):
    """Recompute a saved calculation from its own trip snapshot and new inputs."""
    _load_calculation(calculation_id, db)
    try:
        calculation = calculation_service.recompute_calculation(
            db, calculation_id, SettlementInput(**calculation_data.model_dump())
        )
    except SettlementValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    return calculation_service.to_response(calculation)


@router.delete("/{calculation_id}")
async def delete_calculation(
    calculation_id: int,
    db: Session = Depends(get_db)
):
    """Delete a saved calculation."""
    _load_calculation(calculation_id, db)
    calculation_service.delete_calculation(db, calculation_id)
    return format_response({"id": calculation_id}, message="Calculation deleted")


@router.get("/{calculation_id}/statement", response_model=Statement)
async def get_calculation_statement(
    calculation_id: int,
    db: Session = Depends(get_db)
):
    """Printable statement rows for a saved calculation."""
    calculation = _load_calculation(calculation_id, db)
    return build_statement(
        calculation_service.snapshots_of(calculation),
        calculation_service.result_of(calculation)
    )
