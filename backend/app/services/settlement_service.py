"""
Settlement service for multi-trip driver and fleet owner settlements.

Everything here is a pure function of its arguments: callers load trips
and pass snapshots in, nothing is read from the database or request state.
"""
import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence
from decimal import Decimal
from app.core.config import settings
from app.core.utils import to_decimal, format_money
from app.models.ledger import LedgerType
from app.schemas.settlement import (
    FleetBalance, FleetOwnerAdvanceRow, FleetOwnerStatement, FleetOwnerSummary,
    FleetOwnerTripRow, FleetTransaction, KmBlock, LedgerLine, PodAmountMode,
    SettlementInput, SettlementResult, Statement, StatementLine, StatementLines,
    TripLedgerSnapshot
)

logger = logging.getLogger(__name__)

KM_ORDER_ERROR = "New KM should be greater than Old KM"

TO_BE_PAID_TO = "to be paid to driver/fleet"
TO_BE_PAID_BY = "to be paid by driver/fleet"
NO_BALANCE = "no outstanding balance"

NO_RECORDS = "No records"


class SettlementValidationError(ValueError):
    """Raised when settlement inputs are rejected before any computation."""


def settlement_direction(due: Decimal) -> str:
    """Label telling who pays whom for a given due amount."""
    if due > 0:
        return TO_BE_PAID_TO
    if due < 0:
        return TO_BE_PAID_BY
    return NO_BALANCE


def sum_amounts(lines: Iterable[LedgerLine]) -> Decimal:
    """Sum ledger amounts, counting a missing amount as zero."""
    return sum((to_decimal(line.amount) for line in lines), Decimal(0))


def resolve_ledger(trips: Sequence[TripLedgerSnapshot], ledger: Optional[LedgerType] = None) -> LedgerType:
    """Pick the single ledger the trips settle against."""
    ledger = ledger or trips[0].ledger
    mixed = [t.trip_number for t in trips if t.ledger != ledger]
    if mixed:
        raise SettlementValidationError(
            f"Trips {', '.join(mixed)} do not use the {ledger.value} ledger"
        )
    return ledger


def validate_input(settlement_input: SettlementInput) -> None:
    """Reject odometer readings that would give zero or negative distance."""
    if settlement_input.new_km <= settlement_input.old_km:
        raise SettlementValidationError(KM_ORDER_ERROR)


def compute_from_totals(
    total_expenses: Decimal,
    total_advances: Decimal,
    settlement_input: SettlementInput
) -> SettlementResult:
    """
    Compute a settlement from already-summed ledger totals.

    Used directly when editing a saved calculation, whose totals come from
    its stored snapshot rather than from the live trips.
    """
    validate_input(settlement_input)

    total_km = settlement_input.new_km - settlement_input.old_km
    km_value = total_km * settlement_input.per_km_rate
    total = km_value + total_expenses + settlement_input.previous_balance
    due = total - total_advances

    return SettlementResult(
        old_km=settlement_input.old_km,
        new_km=settlement_input.new_km,
        per_km_rate=settlement_input.per_km_rate,
        previous_balance=settlement_input.previous_balance,
        next_service_km=settlement_input.next_service_km,
        total_km=total_km,
        km_value=km_value,
        total_expenses=total_expenses,
        total_advances=total_advances,
        total=total,
        due=due,
        direction=settlement_direction(due),
    )


def compute_settlement(
    trips: Sequence[TripLedgerSnapshot],
    settlement_input: SettlementInput,
    ledger: Optional[LedgerType] = None
) -> SettlementResult:
    """
    Compute the net amount between the operator and a driver or fleet owner.

    total_km = new_km - old_km
    km_value = total_km * per_km_rate
    total    = km_value + total_expenses + previous_balance
    due      = total - total_advances

    No rounding is applied; presentation rounds to 2 places.
    """
    validate_input(settlement_input)
    if not trips:
        raise SettlementValidationError("At least one trip is required")
    resolve_ledger(trips, ledger)

    total_expenses = sum((sum_amounts(t.expenses) for t in trips), Decimal(0))
    total_advances = sum((sum_amounts(t.advances) for t in trips), Decimal(0))

    result = compute_from_totals(total_expenses, total_advances, settlement_input)
    logger.debug(f"Settlement over {len(trips)} trips: due={result.due} ({result.direction})")
    return result


def _lines_for(trip: TripLedgerSnapshot, entries: List[LedgerLine]) -> List[StatementLine]:
    if not entries:
        return [StatementLine(trip_number=trip.trip_number, reason=NO_RECORDS, placeholder=True)]
    return [
        StatementLine(
            date=entry.paid_at,
            trip_number=trip.trip_number,
            amount=entry.amount,
            reason=entry.reason,
            category=entry.category,
        )
        for entry in entries
    ]


def build_statement_lines(trips: Sequence[TripLedgerSnapshot]) -> StatementLines:
    """
    Flatten trip ledgers into advance and expense table rows.

    Rows keep trip order, then entry order within a trip; they are not
    re-sorted by date.
    """
    advances: List[StatementLine] = []
    expenses: List[StatementLine] = []
    for trip in trips:
        advances.extend(_lines_for(trip, trip.advances))
        expenses.extend(_lines_for(trip, trip.expenses))
    return StatementLines(advances=advances, expenses=expenses)


def format_summary(result: SettlementResult) -> str:
    """Plain-text settlement summary, money rounded to 2 places."""
    summary_lines = [
        f"Old KM: {result.old_km}",
        f"New KM: {result.new_km}",
        f"Total KM: {result.total_km}",
        f"Rate per KM: {format_money(result.per_km_rate)}",
        f"KM value: {format_money(result.km_value)}",
        f"Expenses: +{format_money(result.total_expenses)}",
        f"Previous balance: {format_money(result.previous_balance)}",
        f"Total: {format_money(result.total)}",
        f"Advances: -{format_money(result.total_advances)}",
        f"Due: {format_money(abs(result.due))} ({result.direction})",
    ]
    return "\n".join(summary_lines)


def build_statement(
    trips: Sequence[TripLedgerSnapshot],
    result: SettlementResult,
    company_name: Optional[str] = None
) -> Statement:
    """Assemble every block of a printable multi-trip statement."""
    lines = build_statement_lines(trips)
    return Statement(
        advances=lines.advances,
        expenses=lines.expenses,
        company_name=company_name or settings.COMPANY_NAME,
        trip_numbers=[t.trip_number for t in trips],
        km_block=KmBlock(
            old_km=result.old_km,
            new_km=result.new_km,
            total_km=result.total_km,
            per_km_rate=result.per_km_rate,
            km_value=result.km_value,
        ),
        result=result,
        summary=format_summary(result),
    )


def trip_freight(trip: TripLedgerSnapshot) -> Decimal:
    """Agreed freight of a trip, falling back to its loads when no rate is set."""
    freight = to_decimal(trip.rate)
    if not freight:
        freight = sum(
            (to_decimal(load.truck_hire_cost) or to_decimal(load.total_rate) for load in trip.loads),
            Decimal(0)
        )
    return freight


def compute_fleet_balance(trip: TripLedgerSnapshot) -> FleetBalance:
    """
    Fleet owner receipt for a single trip.

    pod_balance is taken as given; it is entered by the office and is not
    derived from anything here.
    """
    if trip.ledger != LedgerType.FLEET:
        raise SettlementValidationError(f"Trip {trip.trip_number} is not a fleet owner trip")

    freight = trip_freight(trip)

    total_expenses = sum_amounts(trip.expenses)
    total_paid = sum_amounts(trip.advances)
    freight_with_expenses = freight + total_expenses
    net_balance = freight_with_expenses - total_paid - trip.pod_balance - trip.commission

    transactions = [
        FleetTransaction(
            date=e.paid_at,
            reference=e.reference_number or e.category,
            description=e.reason,
            amount=to_decimal(e.amount),
            type="expense",
        )
        for e in trip.expenses
    ] + [
        FleetTransaction(
            date=a.paid_at,
            reference=a.reference_number or a.payment_type,
            description=a.reason,
            amount=to_decimal(a.amount),
            type="advance",
        )
        for a in trip.advances
    ]
    # Receipt rows are chronological, unlike the driver statement
    transactions.sort(key=lambda t: t.date or datetime.min)

    return FleetBalance(
        trip_id=trip.trip_id,
        trip_number=trip.trip_number,
        freight=freight,
        total_expenses=total_expenses,
        freight_with_expenses=freight_with_expenses,
        total_paid=total_paid,
        pod_balance=trip.pod_balance,
        commission=trip.commission,
        net_balance=net_balance,
        direction=settlement_direction(net_balance),
        transactions=transactions,
    )


def compute_fleet_owner_statement(
    trips: Sequence[TripLedgerSnapshot],
    mode: PodAmountMode = PodAmountMode.WITH_POD,
    fleet_owner_id: Optional[int] = None
) -> FleetOwnerStatement:
    """
    Statement of everything owed to a fleet owner over several trips.

    With POD the whole freight counts as payable; without POD the POD
    balance held back on each trip is left out. Advance rows keep trip
    order, then entry order.
    """
    if not trips:
        raise SettlementValidationError("At least one trip is required")
    resolve_ledger(trips, LedgerType.FLEET)

    rows: List[FleetOwnerTripRow] = []
    advances: List[FleetOwnerAdvanceRow] = []
    for trip in trips:
        amount = trip_freight(trip)
        if mode == PodAmountMode.WITHOUT_POD:
            amount -= trip.pod_balance

        rows.append(FleetOwnerTripRow(
            trip_id=trip.trip_id,
            trip_number=trip.trip_number,
            scheduled_date=trip.scheduled_date,
            amount=amount,
            pod_balance=trip.pod_balance,
            pod_pending=trip.pod_balance - trip.pod_balance_paid,
            advances_total=sum_amounts(trip.advances),
        ))
        advances.extend(
            FleetOwnerAdvanceRow(
                trip_id=trip.trip_id,
                trip_number=trip.trip_number,
                scheduled_date=trip.scheduled_date,
                paid_at=a.paid_at,
                amount=to_decimal(a.amount),
                reason=a.reason,
                payment_type=a.payment_type,
            )
            for a in trip.advances
        )

    total_amount = sum((r.amount for r in rows), Decimal(0))
    total_advances_paid = sum((r.advances_total for r in rows), Decimal(0))
    summary = FleetOwnerSummary(
        total_amount=total_amount,
        total_advances_paid=total_advances_paid,
        total_pending=total_amount - total_advances_paid,
        total_pod=sum((r.pod_balance for r in rows), Decimal(0)),
        total_pod_pending=sum((r.pod_pending for r in rows), Decimal(0)),
    )
    logger.debug(f"Fleet owner statement over {len(rows)} trips: pending={summary.total_pending}")
    return FleetOwnerStatement(
        fleet_owner_id=fleet_owner_id,
        mode=mode,
        summary=summary,
        trips=rows,
        advances=advances,
    )


def totals_by_ledger(trips: Sequence[TripLedgerSnapshot]) -> Dict[str, Decimal]:
    """Advance and expense totals, used by the driver summary."""
    return {
        "total_advances": sum((sum_amounts(t.advances) for t in trips), Decimal(0)),
        "total_expenses": sum((sum_amounts(t.expenses) for t in trips), Decimal(0)),
    }
