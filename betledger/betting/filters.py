"""
Read-only views over the ledger: bet search and bankroll history windows.
"""
from datetime import datetime, timedelta
from typing import Iterable, Optional, Tuple, Union

from betledger.betting.models import BankrollPoint, Bet, Outcome, to_utc, utc_now

HISTORY_RANGES = {
    "all": None,
    "30d": timedelta(days=30),
    "7d": timedelta(days=7),
}


def filter_bets(
    bets: Iterable[Bet],
    search: str = "",
    tipster: str = "",
    outcomes: Optional[Iterable[Union[Outcome, str]]] = None,
) -> Tuple[Bet, ...]:
    """
    Filter bets, keeping their order.
    
    Args:
        bets: Bet collection
        search: Case-insensitive substring of description or category
        tipster: Case-insensitive substring of tipster (bets without one never match)
        outcomes: Outcomes to keep; all when None
    
    Returns:
        Matching bets
    """
    search = search.lower()
    tipster = tipster.lower()
    allowed = set(Outcome) if outcomes is None else {Outcome(o) for o in outcomes}
    
    def matches(bet: Bet) -> bool:
        if search and search not in bet.description.lower() and not (
            bet.category and search in bet.category.lower()
        ):
            return False
        if tipster and not (bet.tipster and tipster in bet.tipster.lower()):
            return False
        return bet.outcome in allowed
    
    return tuple(bet for bet in bets if matches(bet))


def history_in_range(
    history: Iterable[BankrollPoint],
    time_range: str = "all",
    now: Optional[datetime] = None,
) -> Tuple[BankrollPoint, ...]:
    """Bankroll points inside the window ("all", "30d", "7d"), date-sorted."""
    if time_range not in HISTORY_RANGES:
        raise ValueError(f"Unknown time range: {time_range} (expected one of {', '.join(HISTORY_RANGES)})")
    
    points = sorted(history, key=lambda p: p.date)
    span = HISTORY_RANGES[time_range]
    if span is None:
        return tuple(points)
    
    cutoff = (to_utc(now) if now is not None else utc_now()) - span
    return tuple(p for p in points if p.date >= cutoff)
