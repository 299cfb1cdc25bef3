"""
Calculation service for saving, editing and deleting driver calculations.
"""
import logging
from sqlalchemy.orm import Session
from typing import List, Optional, Sequence
from app.models.calculation import DriverCalculation
from app.models.vehicle import Vehicle
from app.schemas.calculation import CalculationResponse
from app.schemas.settlement import SettlementInput, SettlementResult, TripLedgerSnapshot
from app.services.settlement_service import compute_from_totals, settlement_direction

logger = logging.getLogger(__name__)


class CalculationNotFoundError(LookupError):
    """Raised when a saved calculation does not exist."""


def get_calculation(db: Session, calculation_id: int) -> DriverCalculation:
    """Fetch a calculation or raise CalculationNotFoundError."""
    calculation = db.query(DriverCalculation).filter(
        DriverCalculation.id == calculation_id
    ).first()
    if not calculation:
        raise CalculationNotFoundError("Calculation not found")
    return calculation


def list_calculations_for_driver(db: Session, driver_id: int) -> List[DriverCalculation]:
    """Saved calculations of a driver, newest first."""
    return db.query(DriverCalculation).filter(
        DriverCalculation.driver_id == driver_id
    ).order_by(DriverCalculation.created_at.desc(), DriverCalculation.id.desc()).all()


def snapshots_of(calculation: DriverCalculation) -> List[TripLedgerSnapshot]:
    """Trips as stored with the calculation."""
    return [TripLedgerSnapshot.model_validate(item) for item in calculation.original_trip_data]


def _apply_result(calculation: DriverCalculation, result: SettlementResult) -> None:
    calculation.old_km = result.old_km
    calculation.new_km = result.new_km
    calculation.per_km_rate = result.per_km_rate
    calculation.previous_balance = result.previous_balance
    calculation.next_service_km = result.next_service_km
    calculation.total_km = result.total_km
    calculation.km_value = result.km_value
    calculation.total_expenses = result.total_expenses
    calculation.total_advances = result.total_advances
    calculation.total = result.total
    calculation.due = result.due


def _update_vehicle_readings(db: Session, trips: Sequence[TripLedgerSnapshot], result: SettlementResult) -> None:
    """Carry the new odometer reading and next service point onto the vehicles."""
    vehicle_ids = sorted({t.vehicle_id for t in trips if t.vehicle_id is not None})
    for vehicle in db.query(Vehicle).filter(Vehicle.id.in_(vehicle_ids)).all():
        vehicle.current_km = result.new_km
        if result.next_service_km is not None:
            vehicle.next_service_km = result.next_service_km


def save_or_update_calculation(
    db: Session,
    result: SettlementResult,
    trips: Sequence[TripLedgerSnapshot],
    driver_id: Optional[int] = None,
    is_edit: bool = False,
    existing_id: Optional[int] = None
) -> DriverCalculation:
    """
    Persist a settlement result.

    On create a full snapshot keyed by the trip ids is stored and the
    vehicles' odometer readings are moved forward. On edit the existing
    record's figures are replaced wholesale; its trips, snapshot and
    original creation time are kept. Errors propagate to the caller after
    rollback; nothing is retried.
    """
    try:
        if is_edit:
            calculation = get_calculation(db, existing_id)
            _apply_result(calculation, result)
            logger.info(f"Updated calculation {calculation.id} for driver {calculation.driver_id}")
        else:
            calculation = DriverCalculation(
                driver_id=driver_id,
                trip_ids=[t.trip_id for t in trips],
                original_trip_data=[t.model_dump(mode="json") for t in trips],
            )
            _apply_result(calculation, result)
            db.add(calculation)
            _update_vehicle_readings(db, trips, result)
            logger.info(f"Saved calculation for driver {driver_id} over trips {calculation.trip_ids}")
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(calculation)
    return calculation


def recompute_calculation(
    db: Session,
    calculation_id: int,
    settlement_input: SettlementInput
) -> DriverCalculation:
    """Edit a saved calculation from its own stored totals and new inputs."""
    calculation = get_calculation(db, calculation_id)
    result = compute_from_totals(
        calculation.total_expenses,
        calculation.total_advances,
        settlement_input
    )
    return save_or_update_calculation(
        db, result, snapshots_of(calculation), is_edit=True, existing_id=calculation.id
    )


def delete_calculation(db: Session, calculation_id: int) -> None:
    """Delete a saved calculation."""
    calculation = get_calculation(db, calculation_id)
    db.delete(calculation)
    db.commit()
    logger.info(f"Deleted calculation {calculation_id}")


def result_of(calculation: DriverCalculation) -> SettlementResult:
    """Rebuild the settlement result stored on a calculation."""
    return SettlementResult(
        old_km=calculation.old_km,
        new_km=calculation.new_km,
        per_km_rate=calculation.per_km_rate,
        previous_balance=calculation.previous_balance,
        next_service_km=calculation.next_service_km,
        total_km=calculation.total_km,
        km_value=calculation.km_value,
        total_expenses=calculation.total_expenses,
        total_advances=calculation.total_advances,
        total=calculation.total,
        due=calculation.due,
        direction=settlement_direction(calculation.due),
    )


def to_response(calculation: DriverCalculation) -> CalculationResponse:
    """Build the API response for a calculation."""
    return CalculationResponse(
        id=calculation.id,
        driver_id=calculation.driver_id,
        trip_ids=calculation.trip_ids,
        old_km=calculation.old_km,
        new_km=calculation.new_km,
        per_km_rate=calculation.per_km_rate,
        previous_balance=calculation.previous_balance,
        next_service_km=calculation.next_service_km,
        total_km=calculation.total_km,
        km_value=calculation.km_value,
        total_expenses=calculation.total_expenses,
        total_advances=calculation.total_advances,
        total=calculation.total,
        due=calculation.due,
        direction=settlement_direction(calculation.due),
        original_trip_data=snapshots_of(calculation),
        created_at=calculation.created_at,
        updated_at=calculation.updated_at,
    )
