"""
Registry Package

In-memory registries for the people and expenses of one session.
Nothing here survives the process; persistence is out of scope.
"""

from expense_splitter.registry.errors import (
    DuplicateNameError,
    NotFoundError,
    RegistryError,
)
from expense_splitter.registry.people import PersonRegistry
from expense_splitter.registry.expenses import ExpenseRegistry

__all__ = [
    # Registries
    "ExpenseRegistry",
    "PersonRegistry",
    # Exceptions
    "DuplicateNameError",
    "NotFoundError",
    "RegistryError",
]
