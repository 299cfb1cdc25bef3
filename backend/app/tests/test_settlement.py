"""
Tests for the settlement calculator.
"""
from datetime import datetime
from decimal import Decimal

import pytest

from app.models.ledger import LedgerType
from app.schemas.settlement import (
    LedgerLine, LoadFreight, PodAmountMode, SettlementInput, TripLedgerSnapshot
)
from app.services.settlement_service import (
    KM_ORDER_ERROR, NO_BALANCE, NO_RECORDS, TO_BE_PAID_BY, TO_BE_PAID_TO,
    SettlementValidationError, build_statement, build_statement_lines,
    compute_fleet_balance, compute_fleet_owner_statement, compute_from_totals,
    compute_settlement, format_summary
)


def make_trip(trip_id, advances=(), expenses=(), ledger=LedgerType.SELF, **extra):
    return TripLedgerSnapshot(
        trip_id=trip_id,
        trip_number=f"TRP2509{trip_id:04d}",
        ledger=ledger,
        advances=[LedgerLine(amount=a) if not isinstance(a, LedgerLine) else a for a in advances],
        expenses=[LedgerLine(amount=e) if not isinstance(e, LedgerLine) else e for e in expenses],
        **extra
    )


def make_input(old_km="1000", new_km="1500", rate="19.5", previous_balance="-200"):
    return SettlementInput(
        old_km=Decimal(old_km),
        new_km=Decimal(new_km),
        per_km_rate=Decimal(rate),
        previous_balance=Decimal(previous_balance),
    )


def test_worked_example_paid_to_driver():
    """Test the driver ends up being owed money."""
    trips = [
        make_trip(1, advances=[Decimal("600")], expenses=[Decimal("100")]),
        make_trip(2, advances=[Decimal("400")], expenses=[Decimal("200")]),
    ]
    result = compute_settlement(trips, make_input())

    assert result.total_km == Decimal("500")
    assert result.km_value == Decimal("9750")
    assert result.total_expenses == Decimal("300")
    assert result.total_advances == Decimal("1000")
    assert result.total == Decimal("9850")
    assert result.due == Decimal("8850")
    assert result.direction == TO_BE_PAID_TO


def test_worked_example_paid_by_driver():
    """Test large advances flip the settlement direction."""
    trips = [make_trip(1, advances=[Decimal("10000")], expenses=[Decimal("300")])]
    result = compute_settlement(trips, make_input())

    assert result.due == Decimal("-150")
    assert result.direction == TO_BE_PAID_BY


def test_zero_due_has_no_outstanding_balance():
    """Test an exact settlement."""
    trips = [make_trip(1, advances=[Decimal("1000")])]
    result = compute_settlement(trips, make_input(new_km="1100", rate="10", previous_balance="0"))

    assert result.due == Decimal("0")
    assert result.direction == NO_BALANCE


@pytest.mark.parametrize("new_km", ["1000", "999"])
def test_new_km_must_exceed_old_km(new_km):
    """Test equal or lower odometer readings are rejected."""
    with pytest.raises(SettlementValidationError) as exc_info:
        compute_settlement([make_trip(1)], make_input(new_km=new_km))
    assert str(exc_info.value) == KM_ORDER_ERROR


def test_km_check_runs_before_trip_check():
    """Test odometer validation is reported even without trips."""
    with pytest.raises(SettlementValidationError, match=KM_ORDER_ERROR):
        compute_settlement([], make_input(new_km="900"))


def test_empty_trip_list_is_rejected():
    """Test at least one trip is required."""
    with pytest.raises(SettlementValidationError):
        compute_settlement([], make_input())


def test_missing_amount_counts_as_zero():
    """Test entries without an amount contribute nothing."""
    trips = [make_trip(1, advances=[LedgerLine(reason="cash")], expenses=[LedgerLine(), Decimal("50")])]
    result = compute_settlement(trips, make_input(previous_balance="0"))

    assert result.total_advances == Decimal("0")
    assert result.total_expenses == Decimal("50")
    assert result.due == Decimal("9800")


def test_no_intermediate_rounding():
    """Test fractional kilometre value is kept exactly."""
    result = compute_settlement([make_trip(1)], make_input(old_km="0", new_km="3", rate="0.333", previous_balance="0"))
    assert result.km_value == Decimal("0.999")
    assert result.due == Decimal("0.999")


def test_compute_is_deterministic():
    """Test identical inputs give identical results."""
    trips = [make_trip(1, advances=[Decimal("250.50")], expenses=[Decimal("75.25")])]
    assert compute_settlement(trips, make_input()) == compute_settlement(trips, make_input())


def test_due_formula_with_negative_previous_balance():
    """Test due equals km value plus expenses plus balance minus advances."""
    trips = [make_trip(1, advances=[Decimal("123.45")], expenses=[Decimal("67.89")])]
    settlement_input = make_input(old_km="250", new_km="612", rate="21.75", previous_balance="-1500.5")
    result = compute_settlement(trips, settlement_input)

    expected = Decimal("362") * Decimal("21.75") + Decimal("67.89") + Decimal("-1500.5") - Decimal("123.45")
    assert result.due == expected


def test_self_and_fleet_ledgers_are_not_mixed():
    """Test trips from both ledgers cannot be settled together."""
    trips = [make_trip(1), make_trip(2, ledger=LedgerType.FLEET)]
    with pytest.raises(SettlementValidationError):
        compute_settlement(trips, make_input())


def test_compute_from_totals_matches_compute_settlement():
    """Test the edit path reproduces the original due."""
    trips = [make_trip(1, advances=[Decimal("1000")], expenses=[Decimal("300")])]
    original = compute_settlement(trips, make_input())
    again = compute_from_totals(original.total_expenses, original.total_advances, make_input())
    assert again == original


def test_statement_lines_keep_trip_then_entry_order():
    """Test rows are not re-sorted by date."""
    late = datetime(2025, 9, 20)
    early = datetime(2025, 9, 2)
    trips = [
        make_trip(1, advances=[LedgerLine(amount=Decimal("100"), paid_at=late, reason="fuel"),
                               LedgerLine(amount=Decimal("200"), paid_at=early, reason="toll")]),
        make_trip(2, advances=[LedgerLine(amount=Decimal("300"), paid_at=early)]),
    ]
    lines = build_statement_lines(trips)

    assert [line.amount for line in lines.advances] == [Decimal("100"), Decimal("200"), Decimal("300")]
    assert [line.trip_number for line in lines.advances] == ["TRP25090001", "TRP25090001", "TRP25090002"]
    assert lines.advances[0].reason == "fuel"


def test_statement_lines_placeholder_per_empty_category():
    """Test a trip without entries yields one placeholder row."""
    trips = [make_trip(1, advances=[Decimal("100")]), make_trip(2, expenses=[Decimal("40")])]
    lines = build_statement_lines(trips)

    assert len(lines.advances) == 2
    assert lines.advances[1].placeholder is True
    assert lines.advances[1].reason == NO_RECORDS
    assert lines.advances[1].trip_number == "TRP25090002"
    assert len(lines.expenses) == 2
    assert lines.expenses[0].placeholder is True
    assert lines.expenses[1].amount == Decimal("40")


def test_summary_rounds_for_display_only():
    """Test presentation rounds to 2 places while the result stays exact."""
    result = compute_settlement([make_trip(1)], make_input(old_km="0", new_km="3", rate="0.3335", previous_balance="0"))
    summary = format_summary(result)

    assert result.due == Decimal("1.0005")
    assert "Due: 1.00 (to be paid to driver/fleet)" in summary


def test_summary_shows_absolute_due_with_direction():
    """Test a negative due is printed with the paid-by label."""
    trips = [make_trip(1, advances=[Decimal("10000")], expenses=[Decimal("300")])]
    summary = format_summary(compute_settlement(trips, make_input()))
    assert "Due: 150.00 (to be paid by driver/fleet)" in summary
    assert "KM value: 9,750.00" in summary


def test_build_statement_collects_blocks():
    """Test the full statement carries km block, rows and summary."""
    trips = [make_trip(1, advances=[Decimal("1000")], expenses=[Decimal("300")])]
    result = compute_settlement(trips, make_input())
    statement = build_statement(trips, result, company_name="Test Carriers")

    assert statement.company_name == "Test Carriers"
    assert statement.trip_numbers == ["TRP25090001"]
    assert statement.km_block.total_km == Decimal("500")
    assert statement.result.due == Decimal("8850")
    assert "Total: 9,850.00" in statement.summary


def test_fleet_balance_uses_trip_rate():
    """Test fleet receipt net balance subtracts pod balance and commission."""
    trip = make_trip(
        1,
        ledger=LedgerType.FLEET,
        advances=[LedgerLine(amount=Decimal("5000"), paid_at=datetime(2025, 9, 5))],
        expenses=[LedgerLine(amount=Decimal("700"), paid_at=datetime(2025, 9, 3), category="fuel")],
        rate=Decimal("20000"),
        commission=Decimal("1000"),
        pod_balance=Decimal("2000"),
    )
    balance = compute_fleet_balance(trip)

    assert balance.freight == Decimal("20000")
    assert balance.freight_with_expenses == Decimal("20700")
    assert balance.total_paid == Decimal("5000")
    assert balance.net_balance == Decimal("12700")
    assert [t.type for t in balance.transactions] == ["expense", "advance"]
    assert balance.transactions[0].reference == "fuel"


def test_fleet_balance_falls_back_to_loads():
    """Test freight comes from loads when the trip has no rate."""
    trip = make_trip(
        1,
        ledger=LedgerType.FLEET,
        loads=[
            LoadFreight(truck_hire_cost=Decimal("15000"), total_rate=Decimal("18000")),
            LoadFreight(truck_hire_cost=Decimal("0"), total_rate=Decimal("4000")),
        ],
    )
    assert compute_fleet_balance(trip).freight == Decimal("19000")


def test_fleet_balance_rejects_self_trip():
    """Test self-owned trips have no fleet receipt."""
    with pytest.raises(SettlementValidationError):
        compute_fleet_balance(make_trip(1))


def test_fleet_balance_orders_transactions_by_date():
    """Test receipt rows are chronological across advances and expenses."""
    trip = make_trip(
        1,
        ledger=LedgerType.FLEET,
        advances=[
            LedgerLine(amount=Decimal("3000"), paid_at=datetime(2025, 9, 1), reason="loading advance"),
            LedgerLine(amount=Decimal("2000"), paid_at=datetime(2025, 9, 6), reason="balance advance"),
        ],
        expenses=[LedgerLine(amount=Decimal("700"), paid_at=datetime(2025, 9, 3), category="fuel")],
        rate=Decimal("20000"),
    )
    balance = compute_fleet_balance(trip)

    assert [t.date for t in balance.transactions] == [
        datetime(2025, 9, 1), datetime(2025, 9, 3), datetime(2025, 9, 6)
    ]
    assert [t.type for t in balance.transactions] == ["advance", "expense", "advance"]


def fleet_owner_trips():
    return [
        make_trip(
            1,
            ledger=LedgerType.FLEET,
            advances=[LedgerLine(amount=Decimal("5000"), reason="diesel", payment_type="cash")],
            rate=Decimal("20000"),
            pod_balance=Decimal("2000"),
            pod_balance_paid=Decimal("500"),
        ),
        make_trip(
            2,
            ledger=LedgerType.FLEET,
            advances=[
                LedgerLine(amount=Decimal("1000"), reason="toll"),
                LedgerLine(amount=None, reason="pending slip"),
            ],
            loads=[LoadFreight(truck_hire_cost=Decimal("12000"), total_rate=Decimal("15000"))],
            pod_balance=Decimal("1000"),
        ),
    ]


def test_fleet_owner_statement_with_pod():
    """Test the whole freight is payable when POD is included."""
    statement = compute_fleet_owner_statement(fleet_owner_trips(), PodAmountMode.WITH_POD, fleet_owner_id=7)

    assert statement.fleet_owner_id == 7
    assert [row.amount for row in statement.trips] == [Decimal("20000"), Decimal("12000")]
    assert statement.summary.total_amount == Decimal("32000")
    assert statement.summary.total_advances_paid == Decimal("6000")
    assert statement.summary.total_pending == Decimal("26000")
    assert statement.summary.total_pod == Decimal("3000")
    assert statement.summary.total_pod_pending == Decimal("2500")


def test_fleet_owner_statement_without_pod():
    """Test POD balances are held back from the payable amount."""
    statement = compute_fleet_owner_statement(fleet_owner_trips(), PodAmountMode.WITHOUT_POD)

    assert [row.amount for row in statement.trips] == [Decimal("18000"), Decimal("11000")]
    assert statement.summary.total_amount == Decimal("29000")
    assert statement.summary.total_pending == Decimal("23000")


def test_fleet_owner_statement_merges_advances_in_trip_order():
    """Test advance rows carry their trip and keep entry order."""
    statement = compute_fleet_owner_statement(fleet_owner_trips())

    assert [(a.trip_number, a.reason) for a in statement.advances] == [
        ("TRP25090001", "diesel"),
        ("TRP25090002", "toll"),
        ("TRP25090002", "pending slip"),
    ]
    assert statement.advances[2].amount == Decimal("0")


def test_fleet_owner_statement_rejects_self_trips():
    """Test only fleet ledger trips go on a fleet owner statement."""
    with pytest.raises(SettlementValidationError):
        compute_fleet_owner_statement([make_trip(1)])
    with pytest.raises(SettlementValidationError):
        compute_fleet_owner_statement([])
