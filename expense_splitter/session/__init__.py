"""Session package."""

from expense_splitter.session.session import SplitSession

__all__ = ["SplitSession"]
