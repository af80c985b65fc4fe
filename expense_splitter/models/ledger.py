"""
Core Data Models for Expense Splitter

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be immutable once created, so the engine can borrow them safely

DESIGN DECISION: Money is Decimal everywhere. Floats coming from a UI are
converted through str() so 0.1 stays 0.1 instead of its binary neighbour.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_decimal(value: Any) -> Any:
    """Convert floats through their repr; leave everything else to pydantic."""
    if isinstance(value, float):
        return Decimal(str(value))
    return value


# =============================================================================
# PARTICIPANTS AND EXPENSES
# =============================================================================

class Person(BaseModel):
    """
    A participant in the group.

    Identity is the id, which the person registry assigns and never reuses.
    Name uniqueness (case-insensitive) is enforced by the registry, not here.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: int = Field(
        ...,
        ge=1,
        description="Stable identifier for the session"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )

    @property
    def name_key(self) -> str:
        """Case-insensitive comparison key for the name."""
        return self.name.casefold()


class Expense(BaseModel):
    """
    A single shared expense.

    The payer advanced the full amount; every beneficiary owes an equal share.
    The payer may also be a beneficiary.

    CRITICAL: Expenses are immutable. There is no edit operation, only
    explicit deletion or cascading removal with a person.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: int = Field(
        ...,
        ge=1,
        description="Unique expense identifier"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What the money was spent on"
    )
    amount: Annotated[
        Decimal,
        Field(gt=0, description="Total amount paid")
    ]
    paid_by: int = Field(
        ...,
        description="Id of the person who paid"
    )
    for_whom: tuple[int, ...] = Field(
        ...,
        min_length=1,
        description="Ids of the people sharing the cost"
    )

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount(cls, v: Any) -> Any:
        return _to_decimal(v)

    @model_validator(mode='after')
    def validate_beneficiaries(self) -> 'Expense':
        """Reject repeated beneficiaries instead of collapsing them."""
        if len(set(self.for_whom)) != len(self.for_whom):
            raise ValueError("Beneficiaries must not repeat")
        return self

    @property
    def share(self) -> Decimal:
        """Unrounded amount each beneficiary owes."""
        return self.amount / len(self.for_whom)

    def involves(self, person_id: int) -> bool:
        """Is the person the payer or one of the beneficiaries?"""
        return self.paid_by == person_id or person_id in self.for_whom


# =============================================================================
# ENGINE OUTPUT
# =============================================================================

class Settlement(BaseModel):
    """
    A single directed payment that moves both parties toward zero.

    Output only, never stored. Serializes with `from` / `to` keys.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_person: Person = Field(
        ...,
        alias="from",
        description="Debtor making the payment"
    )
    to_person: Person = Field(
        ...,
        alias="to",
        description="Creditor receiving the payment"
    )
    amount: Annotated[
        Decimal,
        Field(gt=0, description="Amount rounded to currency precision")
    ]

    def describe(self) -> str:
        """Human-readable one-liner, e.g. 'Bob pays Alice $50.00'."""
        return f"{self.from_person.name} pays {self.to_person.name} ${self.amount:,.2f}"


class BalanceEntry(BaseModel):
    """One person's net position, ready for display."""
    model_config = ConfigDict(frozen=True)

    person: Person
    balance: Decimal = Field(
        ...,
        description="Unrounded net balance (positive = is owed)"
    )
    rounded: Decimal = Field(
        ...,
        description="Balance rounded for display"
    )
    settled: bool = Field(
        ...,
        description="Is the balance within tolerance of zero?"
    )


class SettlementReport(BaseModel):
    """
    Everything a presentation layer needs after a computation.

    Balances are listed in registry order; settlements in emission order.
    """

    generated_at: datetime = Field(
        default_factory=_utcnow
    )
    balances: list[BalanceEntry] = Field(default_factory=list)
    settlements: list[Settlement] = Field(default_factory=list)
    total_spent: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Sum of all expense amounts"
    )

    @property
    def is_settled(self) -> bool:
        """True when nobody owes anybody."""
        return not self.settlements

    @property
    def transaction_count(self) -> int:
        return len(self.settlements)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'duplicate')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation.

    Stage 1: Schema validation (required fields, value ranges)
    Stage 2: Semantic validation (checks against the current session)
    """

    subject: str = Field(
        ...,
        pattern="^(person|expense)$",
        description="What kind of input was validated"
    )
    validated_at: datetime = Field(
        default_factory=_utcnow
    )

    schema_valid: bool = Field(
        ...,
        description="Did schema validation pass?"
    )
    semantic_valid: bool = Field(
        ...,
        description="Did semantic validation pass?"
    )
    is_valid: bool = Field(
        ...,
        description="Overall validation result"
    )

    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def error_messages(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "error"]
