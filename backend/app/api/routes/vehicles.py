"""
Vehicle management routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from app.db.session import get_db
from app.models.user import UserRole
from app.models.vehicle import Vehicle, OwnershipType
from app.schemas.vehicle import VehicleCreate, VehicleResponse
from app.api.routes.users import get_user_or_404

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


def get_vehicle_or_404(vehicle_id: int, db: Session) -> Vehicle:
    vehicle = db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()
    if not vehicle:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vehicle not found"
        )
    return vehicle


@router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle_data: VehicleCreate,
    db: Session = Depends(get_db)
):
    """Register a vehicle."""
    if vehicle_data.ownership_type == OwnershipType.FLEET_OWNER:
        if vehicle_data.owner_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Fleet owner vehicles need an owner_id"
            )
        get_user_or_404(vehicle_data.owner_id, db, role=UserRole.FLEET_OWNER)

    existing = db.query(Vehicle).filter(
        Vehicle.registration_number == vehicle_data.registration_number
    ).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Vehicle already registered"
        )

    vehicle = Vehicle(**vehicle_data.model_dump())
    db.add(vehicle)
    db.commit()
    db.refresh(vehicle)
    return vehicle


@router.get("", response_model=List[VehicleResponse])
async def list_vehicles(db: Session = Depends(get_db)):
    """List all vehicles."""
    return db.query(Vehicle).order_by(Vehicle.registration_number).all()


@router.get("/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(
    vehicle_id: int,
    db: Session = Depends(get_db)
):
    """Get vehicle by ID."""
    return get_vehicle_or_404(vehicle_id, db)
