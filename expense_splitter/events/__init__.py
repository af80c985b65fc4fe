"""Session event logging package."""

from expense_splitter.events.logger import (
    SessionEventLogger,
    configure_logging,
    create_session_id,
)

__all__ = ["SessionEventLogger", "configure_logging", "create_session_id"]
