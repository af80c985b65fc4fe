"""
Tests for the settlement engine.

Scenarios come from small groups where the expected balances and
transfers can be worked out by hand; properties are checked on a larger
deterministic pseudo-random group.
"""

import random

import pytest
from decimal import Decimal

from expense_splitter.engine import (
    SettlementEngine,
    apply_settlements,
    compute_balances,
    compute_settlements,
    settle,
)
from expense_splitter.models.ledger import Expense, Person
from expense_splitter.validation import ValidationError

EPS = Decimal("0.01")

ALICE = Person(id=1, name="Alice")
BOB = Person(id=2, name="Bob")
CAROL = Person(id=3, name="Carol")
DAVE = Person(id=4, name="Dave")


def make_expense(expense_id, amount, paid_by, for_whom, description="Expense"):
    return Expense(
        id=expense_id,
        description=description,
        amount=Decimal(str(amount)),
        paid_by=paid_by,
        for_whom=tuple(for_whom),
    )


def by_id(*people):
    return {person.id: person for person in people}


def transfers(settlements):
    """Compact (from, to, amount) view of a settlement list."""
    return [(s.from_person.name, s.to_person.name, s.amount) for s in settlements]


class TestComputeBalances:
    """Tests for the balance phase."""

    def test_two_people_one_expense(self):
        """A pays 100 for A and B: A is owed 50, B owes 50."""
        balances = compute_balances(
            [ALICE, BOB],
            [make_expense(1, 100, ALICE.id, [ALICE.id, BOB.id])],
        )
        assert balances == {1: Decimal("50"), 2: Decimal("-50")}

    def test_three_people_one_expense(self):
        """A pays 90 for everyone: A +60, B -30, C -30."""
        balances = compute_balances(
            [ALICE, BOB, CAROL],
            [make_expense(1, 90, ALICE.id, [1, 2, 3])],
        )
        assert balances == {1: Decimal("60"), 2: Decimal("-30"), 3: Decimal("-30")}

    def test_payer_not_a_beneficiary(self):
        """The payer gets the full amount back when not sharing."""
        balances = compute_balances(
            [ALICE, BOB, CAROL],
            [make_expense(1, 40, ALICE.id, [BOB.id, CAROL.id])],
        )
        assert balances == {1: Decimal("40"), 2: Decimal("-20"), 3: Decimal("-20")}

    def test_every_person_gets_an_entry(self):
        """People without expenses still appear with a zero balance."""
        balances = compute_balances(
            [ALICE, BOB, CAROL],
            [make_expense(1, 10, ALICE.id, [ALICE.id, BOB.id])],
        )
        assert balances[CAROL.id] == Decimal("0")

    def test_no_people(self):
        """Zero people: empty balance map."""
        assert compute_balances([], []) == {}

    def test_no_expenses(self):
        """Zero expenses: everyone at zero."""
        balances = compute_balances([ALICE, BOB], [])
        assert balances == {1: Decimal("0"), 2: Decimal("0")}

    def test_balances_are_not_rounded(self):
        """Shares keep full precision; only transfers are rounded."""
        balances = compute_balances(
            [ALICE, BOB, CAROL],
            [make_expense(1, 100, ALICE.id, [1, 2, 3])],
        )
        assert balances[BOB.id] != Decimal("-33.33")
        assert abs(balances[BOB.id] + Decimal("100") / 3) < Decimal("1e-20")

    def test_conservation(self):
        """Balances always sum to zero within tolerance."""
        balances = compute_balances(
            [ALICE, BOB, CAROL, DAVE],
            [
                make_expense(1, 100, ALICE.id, [1, 2, 3]),
                make_expense(2, 17.35, BOB.id, [2, 3, 4]),
                make_expense(3, 0.01, CAROL.id, [1, 2, 3, 4]),
            ],
        )
        assert abs(sum(balances.values())) < EPS

    def test_empty_beneficiaries_fail_fast(self):
        """A malformed expense raises instead of dividing by zero."""
        malformed = Expense.model_construct(
            id=1,
            description="Broken",
            amount=Decimal("10"),
            paid_by=ALICE.id,
            for_whom=(),
        )
        with pytest.raises(ValidationError, match="no beneficiaries"):
            compute_balances([ALICE, BOB], [malformed])

    def test_unknown_payer_fails_fast(self):
        """Expenses must reference people that were passed in."""
        with pytest.raises(ValidationError, match="unknown person"):
            compute_balances([BOB], [make_expense(1, 10, ALICE.id, [BOB.id])])

    def test_unknown_beneficiary_fails_fast(self):
        """Beneficiaries must be people that were passed in."""
        with pytest.raises(ValidationError, match="unknown people"):
            compute_balances([ALICE], [make_expense(1, 10, ALICE.id, [ALICE.id, BOB.id])])

    def test_idempotent(self):
        """Same input, same output."""
        people = [ALICE, BOB, CAROL]
        expenses = [make_expense(1, 100, ALICE.id, [1, 2, 3])]
        assert compute_balances(people, expenses) == compute_balances(people, expenses)


class TestComputeSettlements:
    """Tests for the settlement phase."""

    def test_scenario_two_people(self):
        """B pays A 50.00."""
        settlements = compute_settlements(
            {1: Decimal("50"), 2: Decimal("-50")},
            by_id(ALICE, BOB),
        )
        assert transfers(settlements) == [("Bob", "Alice", Decimal("50.00"))]

    def test_scenario_three_people_in_debtor_order(self):
        """B then C each pay A 30.00 (tie keeps registry order)."""
        settlements = compute_settlements(
            {1: Decimal("60"), 2: Decimal("-30"), 3: Decimal("-30")},
            by_id(ALICE, BOB, CAROL),
        )
        assert transfers(settlements) == [
            ("Bob", "Alice", Decimal("30.00")),
            ("Carol", "Alice", Decimal("30.00")),
        ]

    def test_largest_debtor_pays_largest_creditor_first(self):
        """Greedy matching walks both sorted lists."""
        settlements = compute_settlements(
            {1: Decimal("20"), 2: Decimal("30"), 3: Decimal("-15"), 4: Decimal("-35")},
            by_id(ALICE, BOB, CAROL, DAVE),
        )
        # Dave (-35) -> Bob (+30), Dave (-5) -> Alice (+20), Carol (-15) -> Alice (+15)
        assert transfers(settlements) == [
            ("Dave", "Bob", Decimal("30.00")),
            ("Dave", "Alice", Decimal("5.00")),
            ("Carol", "Alice", Decimal("15.00")),
        ]

    def test_tied_debtors_keep_input_order(self):
        """Equal debts are settled in people_by_id order."""
        settlements = compute_settlements(
            {1: Decimal("30"), 2: Decimal("20"), 3: Decimal("-25"), 4: Decimal("-25")},
            by_id(ALICE, BOB, CAROL, DAVE),
        )
        assert transfers(settlements) == [
            ("Carol", "Alice", Decimal("25.00")),
            ("Dave", "Alice", Decimal("5.00")),
            ("Dave", "Bob", Decimal("20.00")),
        ]

    def test_amounts_rounded_to_cents(self):
        """100 split three ways: two transfers of 33.33."""
        people = [ALICE, BOB, CAROL]
        balances = compute_balances(people, [make_expense(1, 100, ALICE.id, [1, 2, 3])])
        settlements = compute_settlements(balances, by_id(*people))
        assert transfers(settlements) == [
            ("Bob", "Alice", Decimal("33.33")),
            ("Carol", "Alice", Decimal("33.33")),
        ]

    def test_rounds_half_up(self):
        """A transfer of exactly half a cent rounds up."""
        settlements = compute_settlements(
            {1: Decimal("10.005"), 2: Decimal("-10.005")},
            by_id(ALICE, BOB),
        )
        assert settlements[0].amount == Decimal("10.01")

    def test_balances_within_tolerance_are_settled(self):
        """Sub-cent balances produce no transfers."""
        settlements = compute_settlements(
            {1: Decimal("0.004"), 2: Decimal("-0.004")},
            by_id(ALICE, BOB),
        )
        assert settlements == []

    def test_all_zero(self):
        """Nothing to settle."""
        assert compute_settlements({1: Decimal("0"), 2: Decimal("0")}, by_id(ALICE, BOB)) == []

    def test_empty(self):
        """No people, no settlements."""
        assert compute_settlements({}, {}) == []

    def test_does_not_mutate_balances(self):
        """The caller's balance map is read-only to the engine."""
        balances = {1: Decimal("60"), 2: Decimal("-30"), 3: Decimal("-30")}
        snapshot = dict(balances)
        compute_settlements(balances, by_id(ALICE, BOB, CAROL))
        assert balances == snapshot

    def test_idempotent(self):
        """Same input, same output."""
        balances = {1: Decimal("20"), 2: Decimal("30"), 3: Decimal("-15"), 4: Decimal("-35")}
        people = by_id(ALICE, BOB, CAROL, DAVE)
        assert compute_settlements(balances, people) == compute_settlements(balances, people)

    def test_unknown_person_in_balances(self):
        """Every balance must belong to a known person."""
        with pytest.raises(ValidationError):
            compute_settlements({1: Decimal("5"), 9: Decimal("-5")}, by_id(ALICE))

    def test_custom_tolerance(self):
        """A coarser tolerance treats small balances as settled."""
        engine = SettlementEngine(tolerance=Decimal("1"))
        settlements = engine.compute_settlements(
            {1: Decimal("0.5"), 2: Decimal("-0.5")},
            by_id(ALICE, BOB),
        )
        assert settlements == []

    def test_whole_unit_precision_skips_transfers_that_round_to_zero(self):
        """With no decimal places, a 0.3 debt has nothing to pay."""
        engine = SettlementEngine(decimal_places=0)
        settlements = engine.compute_settlements(
            {1: Decimal("0.3"), 2: Decimal("-0.3")},
            by_id(ALICE, BOB),
        )
        assert settlements == []

    def test_whole_unit_precision_rounds_half_up(self):
        engine = SettlementEngine(decimal_places=0)
        settlements = engine.compute_settlements(
            {1: Decimal("2.5"), 2: Decimal("-2.5")},
            by_id(ALICE, BOB),
        )
        assert transfers(settlements) == [("Bob", "Alice", Decimal("3"))]

    def test_fine_tolerance_below_half_a_cent(self):
        """A tolerance finer than the currency unit never emits 0.00."""
        engine = SettlementEngine(tolerance=Decimal("0.001"))
        assert engine.compute_settlements(
            {1: Decimal("0.003"), 2: Decimal("-0.003")},
            by_id(ALICE, BOB),
        ) == []
        assert transfers(engine.compute_settlements(
            {1: Decimal("0.006"), 2: Decimal("-0.006")},
            by_id(ALICE, BOB),
        )) == [("Bob", "Alice", Decimal("0.01"))]


class TestEndToEnd:
    """Both phases together."""

    def test_cancelling_expenses(self):
        """A pays 20 for both, B pays 20 for both: nothing owed."""
        people = [ALICE, BOB]
        expenses = [
            make_expense(1, 20, ALICE.id, [1, 2]),
            make_expense(2, 20, BOB.id, [1, 2]),
        ]
        balances = compute_balances(people, expenses)
        assert all(balance == 0 for balance in balances.values())
        assert compute_settlements(balances, by_id(*people)) == []

    def test_single_participant(self):
        """Paying only for yourself settles nothing."""
        report = settle([ALICE], [make_expense(1, 42, ALICE.id, [ALICE.id])])
        assert report.settlements == []
        assert report.total_spent == Decimal("42")

    def test_settlements_zero_out_balances(self):
        """Applying every transfer leaves everyone within a cent."""
        people = [ALICE, BOB, CAROL, DAVE]
        expenses = [
            make_expense(1, 120, ALICE.id, [1, 2, 3, 4]),
            make_expense(2, 60, BOB.id, [2, 3]),
            make_expense(3, 44, DAVE.id, [1, 4]),
        ]
        balances = compute_balances(people, expenses)
        settlements = compute_settlements(balances, by_id(*people))
        remaining = apply_settlements(balances, settlements)
        assert all(abs(value) < EPS for value in remaining.values())

    def test_report(self):
        """settle() packages balances, settlements and total."""
        report = settle(
            [ALICE, BOB, CAROL],
            [make_expense(1, 100, ALICE.id, [1, 2, 3])],
        )
        assert [entry.person.name for entry in report.balances] == ["Alice", "Bob", "Carol"]
        assert [entry.rounded for entry in report.balances] == [
            Decimal("66.67"), Decimal("-33.33"), Decimal("-33.33"),
        ]
        assert not any(entry.settled for entry in report.balances)
        assert report.transaction_count == 2
        assert report.total_spent == Decimal("100")

    def test_report_never_shows_negative_zero(self):
        """A tiny negative balance displays as 0.00."""
        engine = SettlementEngine()
        assert str(engine.round_amount(Decimal("-0.001"))) == "0.00"


class TestProperties:
    """Invariants on a larger pseudo-random group."""

    @pytest.fixture
    def group(self):
        rng = random.Random(20240101)
        people = [Person(id=i, name=f"Person {i}") for i in range(1, 9)]
        expenses = []
        for expense_id in range(1, 31):
            beneficiaries = rng.sample([p.id for p in people], rng.randint(1, len(people)))
            expenses.append(make_expense(
                expense_id,
                Decimal(rng.randint(1, 50000)) / 100,
                rng.choice(people).id,
                beneficiaries,
            ))
        return people, expenses

    def test_conservation(self, group):
        people, expenses = group
        assert abs(sum(compute_balances(people, expenses).values())) < EPS

    def test_settlement_count_bound(self, group):
        """At most n - 1 transfers for n people with a nonzero balance."""
        people, expenses = group
        balances = compute_balances(people, expenses)
        settlements = compute_settlements(balances, by_id(*people))
        nonzero = sum(1 for value in balances.values() if abs(value) >= EPS)
        assert len(settlements) <= max(nonzero - 1, 0)

    def test_settlements_move_everyone_toward_zero(self, group):
        """After paying, each residual is only rounding (half a cent per transfer)."""
        people, expenses = group
        balances = compute_balances(people, expenses)
        settlements = compute_settlements(balances, by_id(*people))
        remaining = apply_settlements(balances, settlements)
        for person in people:
            involved = sum(
                1 for s in settlements
                if person.id in (s.from_person.id, s.to_person.id)
            )
            assert abs(remaining[person.id]) < EPS + Decimal("0.005") * involved

    def test_debtors_pay_and_creditors_receive(self, group):
        """Transfers always go from negative to positive balances."""
        people, expenses = group
        balances = compute_balances(people, expenses)
        for settlement in compute_settlements(balances, by_id(*people)):
            assert balances[settlement.from_person.id] < 0
            assert balances[settlement.to_person.id] > 0

    def test_idempotent(self, group):
        people, expenses = group
        first = settle(people, expenses)
        second = settle(people, expenses)
        assert first.balances == second.balances
        assert first.settlements == second.settlements


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
