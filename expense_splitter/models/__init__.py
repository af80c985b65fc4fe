"""
Data Models Package

This package contains all Pydantic models used in the Expense Splitter.
All data flowing through the system must conform to these schemas.
"""

from expense_splitter.models.ledger import (
    BalanceEntry,
    Expense,
    Person,
    Settlement,
    SettlementReport,
    ValidationIssue,
    ValidationResult,
)
from expense_splitter.models.events import (
    EventSeverity,
    SessionEvent,
    SessionEventBuilder,
    SessionEventType,
)

__all__ = [
    # Ledger models
    "BalanceEntry",
    "Expense",
    "Person",
    "Settlement",
    "SettlementReport",
    "ValidationIssue",
    "ValidationResult",
    # Event models
    "EventSeverity",
    "SessionEvent",
    "SessionEventBuilder",
    "SessionEventType",
]
