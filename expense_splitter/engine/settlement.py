"""
Settlement Engine

Turns a snapshot of people and expenses into net balances, and net
balances into a short list of transfers that zero them out.

DESIGN DECISION: The engine is PURE.
- No internal state between calls
- Never mutates the people, expenses or balance map it is given
- Same input, same output (safe to call on every render, safe to cache)

Balances are kept unrounded; only the emitted transfer amounts are rounded
to currency precision, so rounding error never compounds.

KNOWN LIMITATION: settlements come from a greedy largest-debt to
largest-credit matching. It always terminates and conserves money, but it
is not guaranteed to find the theoretical minimum number of transfers
(that is a subset-partition problem). The ordering below is relied upon
by callers and must not change.
"""

from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from typing import Iterable, Mapping, Optional

import structlog

from expense_splitter.config import EngineSettings, get_settings
from expense_splitter.models.ledger import (
    BalanceEntry,
    Expense,
    Person,
    Settlement,
    SettlementReport,
)
from expense_splitter.validation import ValidationError

ZERO = Decimal("0")


class SettlementEngine:
    """
    Balance computation and settlement optimization.

    Both phases share the same tolerance: any balance whose magnitude is
    below it counts as settled.
    """

    def __init__(
        self,
        tolerance: Optional[Decimal] = None,
        decimal_places: Optional[int] = None,
    ):
        """
        Initialize the engine.

        Args:
            tolerance: Balance magnitude treated as zero.
                       Defaults to SPLITTER_ENGINE_TOLERANCE (0.01).
            decimal_places: Precision of emitted transfer amounts.
                            Defaults to SPLITTER_ENGINE_DECIMAL_PLACES (2).
        """
        settings = get_settings().engine
        overrides = {}
        if tolerance is not None:
            overrides["tolerance"] = Decimal(str(tolerance))
        if decimal_places is not None:
            overrides["decimal_places"] = decimal_places
        if overrides:
            settings = EngineSettings(**{**settings.model_dump(), **overrides})

        self.tolerance = settings.tolerance
        self.decimal_places = settings.decimal_places
        self._quantum = settings.quantum
        self._logger = structlog.get_logger(__name__)

    def round_amount(self, value: Decimal) -> Decimal:
        """Round to currency precision, half up, never producing -0.00."""
        rounded = value.quantize(self._quantum, rounding=ROUND_HALF_UP)
        return abs(rounded) if rounded.is_zero() else rounded

    def is_settled(self, balance: Decimal) -> bool:
        return abs(balance) < self.tolerance

    # -------------------------------------------------------------------------
    # Phase 1: balances
    # -------------------------------------------------------------------------

    def compute_balances(
        self,
        people: Iterable[Person],
        expenses: Iterable[Expense],
    ) -> dict[int, Decimal]:
        """
        Compute every person's net balance.

        Positive means the person is owed money, negative means they owe.
        Every person gets an entry, starting at zero. For each expense the
        payer is credited the full amount and each beneficiary is debited
        an equal, unrounded share. A payer who is also a beneficiary gets
        both adjustments.

        Raises:
            ValidationError: An expense has no beneficiaries, or references
                             someone who is not in `people`.
        """
        balances = {person.id: ZERO for person in people}
        expense_count = 0

        for expense in expenses:
            self._check_expense(expense, balances)
            share = expense.share

            balances[expense.paid_by] += expense.amount
            for person_id in expense.for_whom:
                balances[person_id] -= share
            expense_count += 1

        self._logger.debug(
            "balances_computed",
            people=len(balances),
            expenses=expense_count,
        )
        return balances

    @staticmethod
    def _check_expense(expense: Expense, balances: Mapping[int, Decimal]) -> None:
        """Fail fast on expenses the registries should never have accepted."""
        if not expense.for_whom:
            raise ValidationError(
                f"Expense {expense.id} ({expense.description!r}) has no beneficiaries"
            )
        if expense.paid_by not in balances:
            raise ValidationError(
                f"Expense {expense.id} is paid by unknown person {expense.paid_by}"
            )
        unknown = [pid for pid in expense.for_whom if pid not in balances]
        if unknown:
            raise ValidationError(
                f"Expense {expense.id} is shared with unknown people {unknown}"
            )

    # -------------------------------------------------------------------------
    # Phase 2: settlements
    # -------------------------------------------------------------------------

    def compute_settlements(
        self,
        balances: Mapping[int, Decimal],
        people_by_id: Mapping[int, Person],
    ) -> list[Settlement]:
        """
        Produce transfers that bring every balance within tolerance of zero.

        Algorithm:
        1. Debtors are people below -tolerance, creditors above +tolerance
        2. Debtors sorted most negative first, creditors largest first;
           ties keep the order of `people_by_id`
        3. Repeatedly match the first debtor with the first creditor for
           min(debt, credit), dropping whoever reaches zero

        Each round clears at least one party, so there are at most
        len(debtors) + len(creditors) - 1 rounds.

        Returns:
            Transfers in emission order; empty if everyone is settled.
        """
        unknown = [pid for pid in balances if pid not in people_by_id]
        if unknown:
            raise ValidationError(f"Balances reference unknown people {unknown}")

        # Work on a copy; the caller's map is read-only to us
        remaining = {pid: Decimal(balances.get(pid, ZERO)) for pid in people_by_id}

        debtors = [p for p in people_by_id.values() if remaining[p.id] < -self.tolerance]
        creditors = [p for p in people_by_id.values() if remaining[p.id] > self.tolerance]
        debtors.sort(key=lambda p: remaining[p.id])
        creditors.sort(key=lambda p: remaining[p.id], reverse=True)

        settlements = []
        i = j = 0
        while i < len(debtors) and j < len(creditors):
            debtor = debtors[i]
            creditor = creditors[j]
            transfer = min(-remaining[debtor.id], remaining[creditor.id])
            amount = self.round_amount(transfer)

            # A transfer that rounds to nothing at this precision is not emitted
            if transfer > self.tolerance and amount > ZERO:
                settlements.append(Settlement(
                    from_person=debtor,
                    to_person=creditor,
                    amount=amount,
                ))

            remaining[debtor.id] += transfer
            remaining[creditor.id] -= transfer

            if self.is_settled(remaining[debtor.id]):
                i += 1
            if self.is_settled(remaining[creditor.id]):
                j += 1

        self._logger.debug(
            "settlements_computed",
            debtors=len(debtors),
            creditors=len(creditors),
            settlements=len(settlements),
        )
        return settlements

    # -------------------------------------------------------------------------

    def settle(
        self,
        people: Iterable[Person],
        expenses: Iterable[Expense],
    ) -> SettlementReport:
        """Run both phases and package the result for display."""
        people = list(people)
        expenses = list(expenses)

        balances = self.compute_balances(people, expenses)
        people_by_id = {person.id: person for person in people}
        settlements = self.compute_settlements(balances, people_by_id)

        entries = [
            BalanceEntry(
                person=person,
                balance=balances[person.id],
                rounded=self.round_amount(balances[person.id]),
                settled=self.is_settled(balances[person.id]),
            )
            for person in people
        ]

        return SettlementReport(
            balances=entries,
            settlements=settlements,
            total_spent=sum((e.amount for e in expenses), ZERO),
        )


def apply_settlements(
    balances: Mapping[int, Decimal],
    settlements: Iterable[Settlement],
) -> dict[int, Decimal]:
    """
    Return the balances that remain after every transfer is paid.

    The debtor's balance rises by the amount, the creditor's falls.
    Used to check that a settlement plan actually zeroes the group.
    """
    remaining = dict(balances)
    for settlement in settlements:
        remaining[settlement.from_person.id] += settlement.amount
        remaining[settlement.to_person.id] -= settlement.amount
    return remaining


@lru_cache()
def get_engine() -> SettlementEngine:
    """Default engine built from settings (cached)."""
    return SettlementEngine()


def compute_balances(
    people: Iterable[Person],
    expenses: Iterable[Expense],
) -> dict[int, Decimal]:
    """Module-level shortcut for SettlementEngine.compute_balances."""
    return get_engine().compute_balances(people, expenses)


def compute_settlements(
    balances: Mapping[int, Decimal],
    people_by_id: Mapping[int, Person],
) -> list[Settlement]:
    """Module-level shortcut for SettlementEngine.compute_settlements."""
    return get_engine().compute_settlements(balances, people_by_id)


def settle(
    people: Iterable[Person],
    expenses: Iterable[Expense],
) -> SettlementReport:
    """Module-level shortcut for SettlementEngine.settle."""
    return get_engine().settle(people, expenses)
