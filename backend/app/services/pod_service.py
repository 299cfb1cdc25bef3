"""
POD progress tracker.

A trip's proof-of-delivery walks a fixed list of stages one step at a
time: started -> complete -> pod_received -> pod_submitted -> settled.
"""
import logging
from sqlalchemy.orm import Session
from typing import List, Optional, Sequence
from app.db.base import utc_now
from app.models.trip import Trip, TripStatus, PodStatus
from app.schemas.trip import PodReport, PodReportRow

logger = logging.getLogger(__name__)

POD_STAGES = (
    PodStatus.STARTED,
    PodStatus.COMPLETE,
    PodStatus.POD_RECEIVED,
    PodStatus.POD_SUBMITTED,
    PodStatus.SETTLED,
)

POD_STAGE_LABELS = {
    PodStatus.STARTED: "Trip Started",
    PodStatus.COMPLETE: "Trip Completed",
    PodStatus.POD_RECEIVED: "POD Received",
    PodStatus.POD_SUBMITTED: "POD Submitted",
    PodStatus.SETTLED: "Settled",
}

PENDING_STAGES = (PodStatus.STARTED, PodStatus.COMPLETE)


class PodTransitionError(ValueError):
    """Raised for any move other than one step forward."""


def next_stage(current: PodStatus) -> PodStatus:
    """Return the stage after current."""
    try:
        position = POD_STAGES.index(PodStatus(current))
    except ValueError:
        raise PodTransitionError(f"Unknown POD stage: {current}")
    if position == len(POD_STAGES) - 1:
        raise PodTransitionError("already at final step")
    return POD_STAGES[position + 1]


def progress(current: PodStatus) -> float:
    """Fraction of the POD walk completed, 0.2 at started up to 1.0."""
    return (POD_STAGES.index(PodStatus(current)) + 1) / len(POD_STAGES)


def set_pod_status(db: Session, trip: Trip, status: Optional[PodStatus] = None) -> Trip:
    """
    Move the trip's POD one stage forward and persist it.

    If status is given it must be the immediate next stage. Reaching
    "complete" also marks the trip itself completed.
    """
    target = next_stage(trip.pod_status)
    if status is not None and PodStatus(status) != target:
        raise PodTransitionError(
            f"Cannot move POD from {trip.pod_status.value} to {PodStatus(status).value}; next step is {target.value}"
        )

    trip.pod_status = target
    trip.pod_status_date = utc_now()
    if target == PodStatus.COMPLETE:
        trip.status = TripStatus.COMPLETED

    db.commit()
    db.refresh(trip)
    logger.info(f"Trip {trip.trip_number} POD moved to {target.value}")
    return trip


def advance_pod_status(db: Session, trip: Trip) -> Trip:
    """Move the trip's POD to the next stage."""
    return set_pod_status(db, trip)


def build_pod_report(trips: Sequence[Trip]) -> PodReport:
    """
    Split every client load into pending and submitted by its trip's POD stage.

    Loads of trips that are started or complete still wait on their POD;
    from pod_received onwards the POD is counted as submitted.
    """
    pending: List[PodReportRow] = []
    submitted: List[PodReportRow] = []
    for trip in trips:
        for load in trip.loads:
            row = PodReportRow(
                trip_id=trip.id,
                trip_number=trip.trip_number,
                scheduled_date=trip.scheduled_date,
                vehicle_number=trip.vehicle.registration_number if trip.vehicle else None,
                client_name=load.client_name,
                origin_city=load.origin_city,
                destination_city=load.destination_city,
                status=trip.pod_status,
            )
            if trip.pod_status in PENDING_STAGES:
                pending.append(row)
            else:
                submitted.append(row)
    return PodReport(pending=pending, submitted=submitted)
