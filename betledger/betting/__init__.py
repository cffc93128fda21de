"""
Betting module - odds math, bankroll ledger, store and performance metrics.
"""
from betledger.betting.models import (
    Bet,
    BetInput,
    BankrollPoint,
    OddsFormat,
    Outcome,
    PerformanceMetric,
    PeriodType,
)
from betledger.betting.ledger import LedgerState
from betledger.betting.store import LedgerStore
from betledger.betting.performance import (
    PerformanceSummary,
    calculate_performance_metrics,
    metrics_frame,
    summarize_metrics,
)
from betledger.betting.filters import filter_bets, history_in_range

__all__ = [
    "Bet",
    "BetInput",
    "BankrollPoint",
    "OddsFormat",
    "Outcome",
    "PerformanceMetric",
    "PeriodType",
    "LedgerState",
    "LedgerStore",
    "PerformanceSummary",
    "calculate_performance_metrics",
    "metrics_frame",
    "summarize_metrics",
    "filter_bets",
    "history_in_range",
]
