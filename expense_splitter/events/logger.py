"""
Session Event Logger

DESIGN DECISION: Every change to a session is logged.
This provides:
1. Traceability of what the user did before a computation
2. Debugging capability when a settlement looks wrong

The logger:
- Is synchronous, like the rest of the system
- Only writes to the local structured log (events are never stored)
- Tags every event with the session id so one group's events can be grepped
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

# Importing config also configures structlog
from expense_splitter.config import configure_logging
from expense_splitter.models.events import (
    EventSeverity,
    SessionEvent,
    SessionEventBuilder,
)


class SessionEventLogger:
    """
    Writes session events to the structured local log.

    One logger per session; the session id is bound once and included in
    every line.
    """

    def __init__(self, session_id: Optional[UUID] = None):
        """
        Initialize the event logger.

        Args:
            session_id: Id of the owning session. A new one is created
                        if not given.
        """
        self.session_id = session_id or create_session_id()
        self._logger = structlog.get_logger("expense_splitter.session").bind(
            session_id=str(self.session_id),
        )

    def log(self, event: SessionEvent) -> None:
        """Log a session event at the level matching its severity."""
        log_dict = event.to_log_dict()
        # Bound on the logger already
        log_dict.pop("session_id", None)

        if event.severity == EventSeverity.ERROR:
            self._logger.error("session_event", **log_dict)
        elif event.severity == EventSeverity.WARNING:
            self._logger.warning("session_event", **log_dict)
        elif event.severity == EventSeverity.DEBUG:
            self._logger.debug("session_event", **log_dict)
        else:
            self._logger.info("session_event", **log_dict)

    def log_person_added(self, person_id: int, name: str) -> None:
        self.log(SessionEventBuilder.person_added(
            person_id=person_id,
            name=name,
            session_id=self.session_id,
        ))

    def log_person_removed(
        self,
        person_id: int,
        name: str,
        cascaded_expense_ids: list[int],
    ) -> None:
        self.log(SessionEventBuilder.person_removed(
            person_id=person_id,
            name=name,
            cascaded_expense_ids=cascaded_expense_ids,
            session_id=self.session_id,
        ))

    def log_person_rejected(self, name: str, issues: list[dict]) -> None:
        self.log(SessionEventBuilder.person_rejected(
            name=name,
            issues=issues,
            session_id=self.session_id,
        ))

    def log_expense_added(
        self,
        expense_id: int,
        description: str,
        amount: str,
        paid_by: int,
        for_whom: list[int],
    ) -> None:
        self.log(SessionEventBuilder.expense_added(
            expense_id=expense_id,
            description=description,
            amount=amount,
            paid_by=paid_by,
            for_whom=for_whom,
            session_id=self.session_id,
        ))

    def log_expense_removed(self, expense_id: int, description: str) -> None:
        self.log(SessionEventBuilder.expense_removed(
            expense_id=expense_id,
            description=description,
            session_id=self.session_id,
        ))

    def log_expense_rejected(self, description: str, issues: list[dict]) -> None:
        self.log(SessionEventBuilder.expense_rejected(
            description=description,
            issues=issues,
            session_id=self.session_id,
        ))

    def log_expenses_cascaded(self, person_id: int, expense_ids: list[int]) -> None:
        self.log(SessionEventBuilder.expenses_cascaded(
            person_id=person_id,
            expense_ids=expense_ids,
            session_id=self.session_id,
        ))

    def log_settlement_computed(
        self,
        people_count: int,
        settlement_count: int,
        total_spent: str,
    ) -> None:
        self.log(SessionEventBuilder.settlement_computed(
            people_count=people_count,
            settlement_count=settlement_count,
            total_spent=total_spent,
            session_id=self.session_id,
        ))

    def log_session_reset(self, people_count: int, expense_count: int) -> None:
        self.log(SessionEventBuilder.session_reset(
            people_count=people_count,
            expense_count=expense_count,
            session_id=self.session_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an unexpected failure (anything that is not a rejection)."""
        self.log(SessionEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            session_id=self.session_id,
        ))


def create_session_id() -> UUID:
    """
    Create a new session id.

    Every event emitted on behalf of one session carries this value.
    """
    return uuid4()
