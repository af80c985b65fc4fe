"""
Two-Stage Validation Pipeline

DESIGN DECISION: Registry input is validated in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Required field presence
- Amount parsing and range
- Non-empty beneficiary list
- This catches malformed form input

STAGE 2 - SEMANTIC VALIDATION:
- Name uniqueness (case-insensitive)
- Payer and beneficiaries exist in the session
- Repeated beneficiaries
- Suspiciously large amounts / groups (warnings only)

WHY TWO STAGES:
1. Better error messages (know exactly what kind of issue)
2. Stage 2 needs the current people of the session
3. Can skip stage 2 if stage 1 fails

IMPORTANT: Validation NEVER silently fixes issues.
Input is either accepted as given (after whitespace stripping) or rejected.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from expense_splitter.config import AppSettings, get_settings
from expense_splitter.models.ledger import (
    Person,
    ValidationIssue,
    ValidationResult,
)

MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 200


class ValidationError(Exception):
    """
    Input was rejected.

    Carries the full ValidationResult so callers can show every issue,
    not just the first one.
    """

    def __init__(self, message: str, result: Optional[ValidationResult] = None):
        self.result = result
        super().__init__(message)

    @classmethod
    def from_result(cls, result: ValidationResult) -> "ValidationError":
        return cls("; ".join(result.error_messages), result)

    @property
    def issues(self) -> list[ValidationIssue]:
        return self.result.issues if self.result else []


def parse_amount(value: Any) -> Optional[Decimal]:
    """
    Convert raw amount input to Decimal.

    Returns None for anything that is not a finite number.
    Floats go through str() so that 0.1 parses as Decimal('0.1').
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        value = str(value)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


class SessionValidator:
    """
    Validates person and expense input through a two-stage pipeline.

    Stage 1: Schema validation (needs nothing but the input)
    Stage 2: Semantic validation (needs the session's current people)
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    # -------------------------------------------------------------------------
    # People
    # -------------------------------------------------------------------------

    def _validate_person_schema(self, name: Optional[str]) -> list[ValidationIssue]:
        issues = []
        name = (name or "").strip()

        if not name:
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Name is required",
                severity="error",
                suggested_fix="Type the person's name",
            ))
        elif len(name) > MAX_NAME_LENGTH:
            issues.append(ValidationIssue(
                field="name",
                issue_type="invalid_value",
                message=f"Name is longer than {MAX_NAME_LENGTH} characters",
                severity="error",
                suggested_fix="Use a shorter name or a nickname",
            ))

        return issues

    def _validate_person_semantic(
        self,
        name: str,
        people: list[Person],
    ) -> list[ValidationIssue]:
        issues = []
        key = name.strip().casefold()

        if any(person.name_key == key for person in people):
            issues.append(ValidationIssue(
                field="name",
                issue_type="duplicate",
                message="This name has already been added. Please choose a different name.",
                severity="error",
                suggested_fix="Add an initial or a nickname to tell them apart",
            ))

        if len(people) >= self._settings.max_people:
            issues.append(ValidationIssue(
                field="people",
                issue_type="suspicious_value",
                message=f"The group already has {len(people)} people",
                severity="warning",
                suggested_fix="Consider splitting into smaller groups",
            ))

        return issues

    def validate_person(
        self,
        name: Optional[str],
        people: Iterable[Person],
    ) -> ValidationResult:
        """
        Validate a new person's name against the current people.

        Args:
            name: Raw name input (whitespace is stripped before checks)
            people: People already in the session

        Returns:
            ValidationResult with all issues found
        """
        people = list(people)
        issues = self._validate_person_schema(name)
        schema_valid = not any(issue.severity == "error" for issue in issues)

        semantic_valid = False
        if schema_valid:
            semantic_issues = self._validate_person_semantic(name, people)
            issues.extend(semantic_issues)
            semantic_valid = not any(i.severity == "error" for i in semantic_issues)

        return self._build_result("person", schema_valid, semantic_valid, issues)

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def _validate_expense_schema(
        self,
        description: Optional[str],
        amount: Any,
        paid_by: Optional[int],
        for_whom: Optional[Iterable[int]],
    ) -> list[ValidationIssue]:
        issues = []
        description = (description or "").strip()

        if not description:
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="Description is required",
                severity="error",
                suggested_fix="Say what the money was spent on",
            ))
        elif len(description) > MAX_DESCRIPTION_LENGTH:
            issues.append(ValidationIssue(
                field="description",
                issue_type="invalid_value",
                message=f"Description is longer than {MAX_DESCRIPTION_LENGTH} characters",
                severity="error",
            ))

        parsed = parse_amount(amount)
        if parsed is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Amount ({amount!r}) is not a valid number",
                severity="error",
                suggested_fix="Enter the amount using digits, e.g. 12.50",
            ))
        elif parsed <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
            ))

        if paid_by is None:
            issues.append(ValidationIssue(
                field="paid_by",
                issue_type="missing",
                message="Select who paid",
                severity="error",
            ))

        if not for_whom:
            issues.append(ValidationIssue(
                field="for_whom",
                issue_type="missing",
                message="Select at least one person to share the expense",
                severity="error",
            ))

        return issues

    def _validate_expense_semantic(
        self,
        amount: Decimal,
        paid_by: int,
        for_whom: list[int],
        people: list[Person],
    ) -> list[ValidationIssue]:
        issues = []
        known_ids = {person.id for person in people}

        if paid_by not in known_ids:
            issues.append(ValidationIssue(
                field="paid_by",
                issue_type="unknown_person",
                message=f"Payer {paid_by} is not part of the group",
                severity="error",
            ))

        unknown = [pid for pid in for_whom if pid not in known_ids]
        if unknown:
            issues.append(ValidationIssue(
                field="for_whom",
                issue_type="unknown_person",
                message=f"Beneficiaries {unknown} are not part of the group",
                severity="error",
            ))

        if len(set(for_whom)) != len(for_whom):
            issues.append(ValidationIssue(
                field="for_whom",
                issue_type="duplicate",
                message="A person is selected more than once",
                severity="error",
                suggested_fix="Select each person only once",
            ))

        max_amount = Decimal(str(self._settings.max_expense_amount))
        if amount > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount (${amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        if amount.as_tuple().exponent < -2:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="precision",
                message=f"Amount ({amount}) has more than two decimal places",
                severity="info",
            ))

        return issues

    def validate_expense(
        self,
        description: Optional[str],
        amount: Any,
        paid_by: Optional[int],
        for_whom: Optional[Iterable[int]],
        people: Iterable[Person],
    ) -> ValidationResult:
        """
        Validate a new expense against the current people.

        Args:
            description: What the money was spent on
            amount: Raw amount (str, int, float or Decimal)
            paid_by: Id of the payer
            for_whom: Ids of the beneficiaries
            people: People currently in the session

        Returns:
            ValidationResult with all issues found
        """
        people = list(people)
        for_whom = list(for_whom) if for_whom is not None else []

        issues = self._validate_expense_schema(description, amount, paid_by, for_whom)
        schema_valid = not any(issue.severity == "error" for issue in issues)

        semantic_valid = False
        if schema_valid:
            semantic_issues = self._validate_expense_semantic(
                parse_amount(amount), paid_by, for_whom, people,
            )
            issues.extend(semantic_issues)
            semantic_valid = not any(i.severity == "error" for i in semantic_issues)

        return self._build_result("expense", schema_valid, semantic_valid, issues)

    # -------------------------------------------------------------------------

    @staticmethod
    def _build_result(
        subject: str,
        schema_valid: bool,
        semantic_valid: bool,
        issues: list[ValidationIssue],
    ) -> ValidationResult:
        warnings = [issue.message for issue in issues if issue.severity == "warning"]
        return ValidationResult(
            subject=subject,
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=issues,
            warnings=warnings,
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.

        This is what the presentation layer shows next to the form.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed."

        lines = []

        if result.has_errors:
            lines.append("❌ This could not be added:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
