"""
Ledger service for appending and deleting trip advances and expenses.
"""
import logging
from sqlalchemy.orm import Session
from typing import List
from app.db.base import utc_now
from app.models.trip import Trip
from app.models.ledger import LedgerEntry, LedgerType, EntryKind
from app.schemas.ledger import LedgerEntryCreate
from app.services.trip_service import ledger_for

logger = logging.getLogger(__name__)


class LedgerError(ValueError):
    """Raised when an entry is posted to the wrong ledger."""


class LedgerEntryNotFoundError(LookupError):
    """Raised when deleting an index the trip's list does not have."""


def entries_of(trip: Trip, ledger: LedgerType, kind: EntryKind) -> List[LedgerEntry]:
    """Entries of one ledger and kind, in the order they were added."""
    return [e for e in trip.ledger_entries if e.ledger == ledger and e.kind == kind]


def check_ledger(trip: Trip, ledger: LedgerType) -> None:
    """Refuse to mix self and fleet entries on the same trip."""
    expected = ledger_for(trip.ownership_type)
    if ledger != expected:
        raise LedgerError(
            f"Trip {trip.trip_number} uses the {expected.value} ledger, not {ledger.value}"
        )


def add_entry(
    db: Session,
    trip: Trip,
    ledger: LedgerType,
    kind: EntryKind,
    entry_data: LedgerEntryCreate
) -> LedgerEntry:
    """Append an advance or expense to a trip's ledger."""
    check_ledger(trip, ledger)

    values = entry_data.model_dump()
    if values.get("paid_at") is None:
        values["paid_at"] = utc_now()

    entry = LedgerEntry(trip_id=trip.id, ledger=ledger, kind=kind, **values)
    db.add(entry)
    db.commit()
    db.refresh(entry)
    db.refresh(trip)

    logger.info(
        f"{ledger.value.capitalize()} {kind.value} of {entry.amount} added to trip {trip.trip_number}"
    )
    return entry


def delete_entry(
    db: Session,
    trip: Trip,
    ledger: LedgerType,
    kind: EntryKind,
    index: int
) -> LedgerEntry:
    """Delete the entry at a position of the trip's ledger list."""
    check_ledger(trip, ledger)

    entries = entries_of(trip, ledger, kind)
    if index < 0 or index >= len(entries):
        raise LedgerEntryNotFoundError(f"{ledger.value.capitalize()} {kind.value} not found")

    entry = entries[index]
    db.delete(entry)
    db.commit()
    db.refresh(trip)

    logger.info(
        f"{ledger.value.capitalize()} {kind.value} of {entry.amount} deleted from trip {trip.trip_number}"
    )
    return entry
