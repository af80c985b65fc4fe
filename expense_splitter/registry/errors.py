"""Registry exceptions."""

from expense_splitter.validation import ValidationError


class RegistryError(Exception):
    """Base exception for registry lookups."""
    pass


class NotFoundError(RegistryError, KeyError):
    """Entity not found in the registry."""

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0]) if self.args else ""


class DuplicateNameError(ValidationError):
    """A person with the same name (ignoring case) already exists."""
    pass
