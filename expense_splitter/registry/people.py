"""
Person Registry

Owns the people of one session.

GUARANTEES:
- Names are unique ignoring case and surrounding whitespace
- Ids are assigned from a counter and never reused, even after removal
- Iteration order is insertion order (the engine's tie-break order)
"""

from typing import Iterator, Optional

from expense_splitter.models.ledger import Person, ValidationResult
from expense_splitter.registry.errors import DuplicateNameError, NotFoundError
from expense_splitter.validation import SessionValidator, ValidationError


class PersonRegistry:
    """In-memory registry of the people in a session."""

    def __init__(self, validator: Optional[SessionValidator] = None):
        self._validator = validator or SessionValidator()
        self._people: dict[int, Person] = {}
        self._next_id = 1
        self.last_result: Optional[ValidationResult] = None

    def __len__(self) -> int:
        return len(self._people)

    def __iter__(self) -> Iterator[Person]:
        return iter(list(self._people.values()))

    def __contains__(self, person_id: object) -> bool:
        return person_id in self._people

    def add(self, name: str) -> Person:
        """
        Add a person.

        Args:
            name: Display name; surrounding whitespace is stripped

        Returns:
            The new Person with a freshly assigned id

        Raises:
            DuplicateNameError: Someone with that name already exists
            ValidationError: The name is empty or too long
        """
        result = self._validator.validate_person(name, self._people.values())
        self.last_result = result

        if not result.is_valid:
            if any(issue.issue_type == "duplicate" for issue in result.issues):
                raise DuplicateNameError.from_result(result)
            raise ValidationError.from_result(result)

        person = Person(id=self._next_id, name=name)
        self._people[person.id] = person
        self._next_id += 1
        return person

    def remove(self, person_id: int) -> Person:
        """
        Remove a person by id.

        This does NOT touch expenses. Callers must prune dependent expenses
        through ExpenseRegistry.remove_person (SplitSession does both).

        Raises:
            NotFoundError: No person with that id
        """
        person = self.get(person_id)
        del self._people[person_id]
        return person

    def get(self, person_id: int) -> Person:
        try:
            return self._people[person_id]
        except KeyError:
            raise NotFoundError(f"Person {person_id} not found") from None

    def find_by_name(self, name: str) -> Optional[Person]:
        """Case-insensitive lookup by name."""
        key = name.strip().casefold()
        for person in self._people.values():
            if person.name_key == key:
                return person
        return None

    def list_people(self) -> list[Person]:
        return list(self._people.values())

    def by_id(self) -> dict[int, Person]:
        """Snapshot mapping of id to person, in insertion order."""
        return dict(self._people)

    def clear(self) -> None:
        """Remove everyone. Ids keep counting from where they were."""
        self._people.clear()
        self.last_result = None
