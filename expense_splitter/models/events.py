"""
Session Event Models for Expense Splitter

Every change to a session (people, expenses) and every settlement
computation is described by a SessionEvent and written to the structured
local log. Events are not stored; there is no history to replay.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class SessionEventType(str, Enum):
    """Types of events a session emits."""
    # People
    PERSON_ADDED = "person_added"
    PERSON_REMOVED = "person_removed"
    PERSON_REJECTED = "person_rejected"

    # Expenses
    EXPENSE_ADDED = "expense_added"
    EXPENSE_REMOVED = "expense_removed"
    EXPENSE_REJECTED = "expense_rejected"
    EXPENSES_CASCADED = "expenses_cascaded"

    # Engine
    SETTLEMENT_COMPUTED = "settlement_computed"

    # Session lifecycle
    SESSION_RESET = "session_reset"
    SYSTEM_ERROR = "system_error"


class EventSeverity(str, Enum):
    """Severity level for session events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class SessionEvent(BaseModel):
    """
    A single session event.

    The session id plays the role of a correlation id: every event emitted
    by one SplitSession carries the same value.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: SessionEventType = Field(
        ...,
        description="Type of event"
    )
    severity: EventSeverity = Field(
        default=EventSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'person', 'expense', 'settlement')"
    )
    entity_id: Optional[int] = Field(
        default=None,
        description="Registry id of the entity this event relates to"
    )
    session_id: Optional[UUID] = Field(
        default=None,
        description="Session that emitted the event"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "session_id": str(self.session_id) if self.session_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class SessionEventBuilder:
    """
    Helper class to build session events with common patterns.

    Usage:
        event = SessionEventBuilder.person_added(person_id, name, session_id)
        event = SessionEventBuilder.settlement_computed(3, 2, "150.00", session_id)
    """

    @staticmethod
    def person_added(
        person_id: int,
        name: str,
        session_id: UUID
    ) -> SessionEvent:
        return SessionEvent(
            event_type=SessionEventType.PERSON_ADDED,
            entity_type="person",
            entity_id=person_id,
            session_id=session_id,
            description=f"Person added: {name}",
            details={"name": name},
        )

    @staticmethod
    def person_removed(
        person_id: int,
        name: str,
        cascaded_expense_ids: list[int],
        session_id: UUID
    ) -> SessionEvent:
        return SessionEvent(
            event_type=SessionEventType.PERSON_REMOVED,
            entity_type="person",
            entity_id=person_id,
            session_id=session_id,
            description=f"Person removed: {name}",
            details={
                "name": name,
                "cascaded_expense_ids": cascaded_expense_ids,
            },
        )

    @staticmethod
    def person_rejected(
        name: str,
        issues: list[dict],
        session_id: UUID
    ) -> SessionEvent:
        return SessionEvent(
            event_type=SessionEventType.PERSON_REJECTED,
            severity=EventSeverity.WARNING,
            entity_type="person",
            session_id=session_id,
            description=f"Person rejected with {len(issues)} issues",
            details={
                "name": name,
                "issues": issues,
            },
        )

    @staticmethod
    def expense_added(
        expense_id: int,
        description: str,
        amount: str,
        paid_by: int,
        for_whom: list[int],
        session_id: UUID
    ) -> SessionEvent:
        return SessionEvent(
            event_type=SessionEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=expense_id,
            session_id=session_id,
            description=f"Expense added: {description} - ${amount}",
            details={
                "amount": amount,
                "paid_by": paid_by,
                "for_whom": for_whom,
            },
        )

    @staticmethod
    def expense_removed(
        expense_id: int,
        description: str,
        session_id: UUID
    ) -> SessionEvent:
        return SessionEvent(
            event_type=SessionEventType.EXPENSE_REMOVED,
            entity_type="expense",
            entity_id=expense_id,
            session_id=session_id,
            description=f"Expense removed: {description}",
        )

    @staticmethod
    def expense_rejected(
        description: str,
        issues: list[dict],
        session_id: UUID
    ) -> SessionEvent:
        return SessionEvent(
            event_type=SessionEventType.EXPENSE_REJECTED,
            severity=EventSeverity.WARNING,
            entity_type="expense",
            session_id=session_id,
            description=f"Expense rejected with {len(issues)} issues",
            details={
                "description": description,
                "issues": issues,
            },
        )

    @staticmethod
    def expenses_cascaded(
        person_id: int,
        expense_ids: list[int],
        session_id: UUID
    ) -> SessionEvent:
        return SessionEvent(
            event_type=SessionEventType.EXPENSES_CASCADED,
            entity_type="person",
            entity_id=person_id,
            session_id=session_id,
            description=f"{len(expense_ids)} expenses removed with person {person_id}",
            details={"expense_ids": expense_ids},
        )

    @staticmethod
    def settlement_computed(
        people_count: int,
        settlement_count: int,
        total_spent: str,
        session_id: UUID
    ) -> SessionEvent:
        return SessionEvent(
            event_type=SessionEventType.SETTLEMENT_COMPUTED,
            severity=EventSeverity.DEBUG,
            entity_type="settlement",
            session_id=session_id,
            description=(
                f"Settlement computed: {settlement_count} transfers "
                f"for {people_count} people"
            ),
            details={
                "people_count": people_count,
                "settlement_count": settlement_count,
                "total_spent": total_spent,
            },
        )

    @staticmethod
    def session_reset(
        people_count: int,
        expense_count: int,
        session_id: UUID
    ) -> SessionEvent:
        return SessionEvent(
            event_type=SessionEventType.SESSION_RESET,
            session_id=session_id,
            description="Session cleared",
            details={
                "people_count": people_count,
                "expense_count": expense_count,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        session_id: Optional[UUID] = None
    ) -> SessionEvent:
        return SessionEvent(
            event_type=SessionEventType.SYSTEM_ERROR,
            severity=EventSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            session_id=session_id,
        )
