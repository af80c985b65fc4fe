"""
Split Session

This module ties the components together for one group of people:
registries, validator, settlement engine and event logger.

DESIGN DECISION: The session is an explicit object owned by the caller
(a Streamlit session_state entry, a test, a script). Nothing is global.
The engine only ever sees read-only snapshots taken from the session.

The session enforces the boundaries:
- Invalid input never reaches the registries' storage
- Removing a person prunes their expenses BEFORE the person is removed
- Every change is logged
"""

from decimal import Decimal
from typing import Any, Iterable, Optional
from uuid import UUID

from expense_splitter.engine import SettlementEngine
from expense_splitter.events import SessionEventLogger, create_session_id
from expense_splitter.models.ledger import (
    Expense,
    Person,
    Settlement,
    SettlementReport,
    ValidationResult,
)
from expense_splitter.registry import ExpenseRegistry, PersonRegistry
from expense_splitter.validation import SessionValidator, ValidationError


class SplitSession:
    """
    One group's people and expenses, plus the operations on them.

    Flow (mirrors the five-step UI):
    1. add_person / remove_person
    2. add_expense / remove_expense
    3. balances()
    4. settlements()
    5. reset() to start over
    """

    def __init__(
        self,
        engine: Optional[SettlementEngine] = None,
        validator: Optional[SessionValidator] = None,
        event_logger: Optional[SessionEventLogger] = None,
        session_id: Optional[UUID] = None,
    ):
        self.session_id = session_id or create_session_id()
        self._validator = validator or SessionValidator()
        self._engine = engine or SettlementEngine()
        self._events = event_logger or SessionEventLogger(self.session_id)
        self._people = PersonRegistry(self._validator)
        self._expenses = ExpenseRegistry(self._people, self._validator)

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def people(self) -> list[Person]:
        return self._people.list_people()

    @property
    def expenses(self) -> list[Expense]:
        return self._expenses.list_expenses()

    @property
    def validator(self) -> SessionValidator:
        return self._validator

    @property
    def last_expense_result(self) -> Optional[ValidationResult]:
        """Validation result of the latest add_expense call (warnings included)."""
        return self._expenses.last_result

    def get_person(self, person_id: int) -> Person:
        return self._people.get(person_id)

    def get_expense(self, expense_id: int) -> Expense:
        return self._expenses.get(expense_id)

    # -------------------------------------------------------------------------
    # People
    # -------------------------------------------------------------------------

    def add_person(self, name: str) -> Person:
        """
        Add a participant.

        Raises:
            DuplicateNameError: Name already used (ignoring case)
            ValidationError: Name empty or too long
        """
        try:
            person = self._people.add(name)
        except ValidationError as e:
            self._events.log_person_rejected(
                name=name,
                issues=_issue_dicts(e),
            )
            raise

        self._events.log_person_added(person_id=person.id, name=person.name)
        return person

    def remove_person(self, person_id: int) -> tuple[Person, list[Expense]]:
        """
        Remove a participant and every expense they pay for or share.

        Returns:
            (removed_person, removed_expenses)

        Raises:
            NotFoundError: No person with that id (nothing is removed)
        """
        person = self._people.get(person_id)
        cascaded = self._expenses.remove_person(person_id)
        self._people.remove(person_id)

        cascaded_ids = [expense.id for expense in cascaded]
        if cascaded_ids:
            self._events.log_expenses_cascaded(
                person_id=person_id,
                expense_ids=cascaded_ids,
            )
        self._events.log_person_removed(
            person_id=person.id,
            name=person.name,
            cascaded_expense_ids=cascaded_ids,
        )
        return person, cascaded

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def add_expense(
        self,
        description: str,
        amount: Any,
        paid_by: int,
        for_whom: Iterable[int],
    ) -> Expense:
        """
        Record an expense.

        Raises:
            ValidationError: Non-positive or unparseable amount, empty or
                             repeated beneficiaries, unknown people
        """
        try:
            expense = self._expenses.add(description, amount, paid_by, for_whom)
        except ValidationError as e:
            self._events.log_expense_rejected(
                description=description or "",
                issues=_issue_dicts(e),
            )
            raise

        self._events.log_expense_added(
            expense_id=expense.id,
            description=expense.description,
            amount=str(expense.amount),
            paid_by=expense.paid_by,
            for_whom=list(expense.for_whom),
        )
        return expense

    def remove_expense(self, expense_id: int) -> Expense:
        """
        Delete one expense.

        Raises:
            NotFoundError: No expense with that id
        """
        expense = self._expenses.remove(expense_id)
        self._events.log_expense_removed(
            expense_id=expense.id,
            description=expense.description,
        )
        return expense

    # -------------------------------------------------------------------------
    # Computation
    # -------------------------------------------------------------------------

    def balances(self) -> dict[int, Decimal]:
        """Net balance per person id, recomputed from scratch."""
        return self._engine.compute_balances(self.people, self.expenses)

    def settlements(self) -> list[Settlement]:
        """Transfers that settle the group, recomputed from scratch."""
        return self._engine.compute_settlements(self.balances(), self._people.by_id())

    def report(self) -> SettlementReport:
        """Balances, settlements and total spent in one snapshot."""
        report = self._engine.settle(self.people, self.expenses)
        self._events.log_settlement_computed(
            people_count=len(report.balances),
            settlement_count=report.transaction_count,
            total_spent=str(report.total_spent),
        )
        return report

    def record_error(self, error: Exception, step: Optional[str] = None) -> None:
        """Log an unexpected failure raised while working with this session."""
        self._events.log_error(
            error_type=type(error).__name__,
            error_message=str(error),
            details={"step": step} if step else None,
        )

    def reset(self) -> None:
        """Forget everyone and everything; ids keep counting."""
        people_count = len(self._people)
        expense_count = len(self._expenses)
        self._expenses.clear()
        self._people.clear()
        self._events.log_session_reset(
            people_count=people_count,
            expense_count=expense_count,
        )


def _issue_dicts(error: ValidationError) -> list[dict]:
    return [
        {"field": i.field, "type": i.issue_type, "message": i.message}
        for i in error.issues
    ]
