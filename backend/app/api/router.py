"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from app.api.routes import (
    users, vehicles, trips, calculations, settlements
)

api_router = APIRouter()

# Include all route modules
api_router.include_router(users.router)
api_router.include_router(vehicles.router)
api_router.include_router(trips.router)
api_router.include_router(calculations.router)
api_router.include_router(settlements.router)
