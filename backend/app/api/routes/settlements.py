"""
Settlement preview routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.schemas.settlement import SettlementInput, SettlementPreviewRequest, Statement
from app.services import trip_service
from app.services.settlement_service import (
    build_statement, compute_settlement, SettlementValidationError
)

router = APIRouter(prefix="/settlement", tags=["settlement"])


@router.post("/preview", response_model=Statement)
async def preview_settlement(
    preview: SettlementPreviewRequest,
    db: Session = Depends(get_db)
):
    """Compute a multi-trip settlement and its statement without saving."""
    try:
        trips = trip_service.get_trips_by_ids(db, preview.trip_ids)
    except LookupError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )

    snapshots = [trip_service.snapshot_trip(t) for t in trips]
    try:
        result = compute_settlement(
            snapshots, SettlementInput(**preview.model_dump(exclude={"trip_ids"}))
        )
    except SettlementValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    return build_statement(snapshots, result)
