"""Settlement engine package."""

from expense_splitter.engine.settlement import (
    SettlementEngine,
    apply_settlements,
    compute_balances,
    compute_settlements,
    get_engine,
    settle,
)

__all__ = [
    "SettlementEngine",
    "apply_settlements",
    "compute_balances",
    "compute_settlements",
    "get_engine",
    "settle",
]
