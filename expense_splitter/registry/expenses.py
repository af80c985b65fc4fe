"""
Expense Registry

Owns the expenses of one session and validates them against the
session's PersonRegistry before accepting them.

CASCADE CONTRACT:
remove_person(person_id) removes EVERY expense where the person is the
payer or one of the beneficiaries, and returns the removed expenses in
insertion order. After it returns, no stored expense references that
person, so the engine's precondition holds once the person is removed.
"""

from typing import Any, Iterable, Iterator, Optional

from expense_splitter.models.ledger import Expense, ValidationResult
from expense_splitter.registry.errors import NotFoundError
from expense_splitter.registry.people import PersonRegistry
from expense_splitter.validation import SessionValidator, ValidationError, parse_amount


class ExpenseRegistry:
    """In-memory registry of the expenses in a session."""

    def __init__(
        self,
        people: PersonRegistry,
        validator: Optional[SessionValidator] = None,
    ):
        """
        Args:
            people: Registry used to check payer and beneficiaries exist
            validator: Shared validator; a default one is created if omitted
        """
        self._people = people
        self._validator = validator or SessionValidator()
        self._expenses: dict[int, Expense] = {}
        self._next_id = 1
        self.last_result: Optional[ValidationResult] = None

    def __len__(self) -> int:
        return len(self._expenses)

    def __iter__(self) -> Iterator[Expense]:
        return iter(list(self._expenses.values()))

    def add(
        self,
        description: str,
        amount: Any,
        paid_by: int,
        for_whom: Iterable[int],
    ) -> Expense:
        """
        Record a new expense.

        Args:
            description: What the money was spent on
            amount: Total paid; str, int, float or Decimal, must be > 0
            paid_by: Id of the payer
            for_whom: Ids of the beneficiaries (non-empty, no repeats)

        Raises:
            ValidationError: Any of the above does not hold, or a person
                             is not in the registry
        """
        for_whom = list(for_whom) if for_whom is not None else []
        result = self._validator.validate_expense(
            description=description,
            amount=amount,
            paid_by=paid_by,
            for_whom=for_whom,
            people=self._people.list_people(),
        )
        self.last_result = result

        if not result.is_valid:
            raise ValidationError.from_result(result)

        expense = Expense(
            id=self._next_id,
            description=description,
            amount=parse_amount(amount),
            paid_by=paid_by,
            for_whom=tuple(for_whom),
        )
        self._expenses[expense.id] = expense
        self._next_id += 1
        return expense

    def remove(self, expense_id: int) -> Expense:
        """
        Delete one expense.

        Raises:
            NotFoundError: No expense with that id
        """
        expense = self.get(expense_id)
        del self._expenses[expense_id]
        return expense

    def remove_person(self, person_id: int) -> list[Expense]:
        """Cascade: drop every expense the person pays for or shares."""
        removed = [e for e in self._expenses.values() if e.involves(person_id)]
        for expense in removed:
            del self._expenses[expense.id]
        return removed

    def get(self, expense_id: int) -> Expense:
        try:
            return self._expenses[expense_id]
        except KeyError:
            raise NotFoundError(f"Expense {expense_id} not found") from None

    def list_expenses(self) -> list[Expense]:
        return list(self._expenses.values())

    def for_person(self, person_id: int) -> list[Expense]:
        """Expenses the person pays for or shares."""
        return [e for e in self._expenses.values() if e.involves(person_id)]

    def clear(self) -> None:
        self._expenses.clear()
        self.last_result = None
