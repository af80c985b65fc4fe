"""Input validation package."""

from expense_splitter.validation.validator import (
    SessionValidator,
    ValidationError,
    parse_amount,
)

__all__ = ["SessionValidator", "ValidationError", "parse_amount"]
