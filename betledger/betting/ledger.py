"""
Bankroll ledger state and its mutators.

LedgerState is immutable; every mutator returns a new state. The bankroll
history is rebuilt from the bet collection on each mutation:

    seed point (initial bankroll)
    + one point per bet, ordered by (date, insertion order),
      each balance the running sum of realized profit/loss.

Rebuilding keeps the history date-sorted and consistent when bets are
backdated, edited or deleted out of order.
"""
import dataclasses
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple, Union

from betledger.betting.models import (
    Bet,
    BetInput,
    BankrollPoint,
    Outcome,
    to_utc,
    utc_now,
)
from betledger.betting.odds import calculate_profit_loss
from betledger.exceptions import DuplicateBetError, InvalidAmountError

EDITABLE_FIELDS = frozenset(
    f.name for f in dataclasses.fields(Bet) if f.name != "id"
)


@dataclass(frozen=True)
class LedgerState:
    """
    Single source of truth for one ledger.

    bets is most-recent-first (insertion order); identity is by id.
    current_bankroll and bankroll_history are derived in new_state().
    """
    initial_bankroll: float
    seed_date: datetime
    bets: Tuple[Bet, ...] = ()
    current_bankroll: float = 0.0
    bankroll_history: Tuple[BankrollPoint, ...] = ()


def _validate_amount(amount: float, field: str) -> float:
    try:
        amount = float(amount)
    except (TypeError, ValueError):
        raise InvalidAmountError(amount, field)
    if not amount > 0:
        raise InvalidAmountError(amount, field)
    return amount


def chronological(bets: Tuple[Bet, ...]) -> Tuple[Bet, ...]:
    """Bets oldest first; ties keep insertion order."""
    inserted = list(reversed(bets))
    order = sorted(range(len(inserted)), key=lambda i: (inserted[i].date, i))
    return tuple(inserted[i] for i in order)


def build_history(
    initial_bankroll: float,
    seed_date: datetime,
    bets: Tuple[Bet, ...],
) -> Tuple[BankrollPoint, ...]:
    """Seed point plus one cumulative-balance point per bet."""
    ordered = chronological(bets)

    if ordered and ordered[0].date < seed_date:
        seed_date = ordered[0].date

    balance = initial_bankroll
    history = [BankrollPoint(date=seed_date, balance=balance)]
    for bet in ordered:
        balance += bet.realized_profit_loss
        history.append(BankrollPoint(date=bet.date, balance=balance))
    return tuple(history)


def new_state(
    initial_bankroll: float,
    seed_date: Optional[datetime] = None,
    bets: Tuple[Bet, ...] = (),
) -> LedgerState:
    """Build a state with its derived balance and history."""
    seed_date = to_utc(seed_date) if seed_date is not None else utc_now()
    bets = tuple(bets)
    return LedgerState(
        initial_bankroll=initial_bankroll,
        seed_date=seed_date,
        bets=bets,
        current_bankroll=initial_bankroll + sum(b.realized_profit_loss for b in bets),
        bankroll_history=build_history(initial_bankroll, seed_date, bets),
    )


def new_ledger(initial_bankroll: float = 1000.0, now: Optional[datetime] = None) -> LedgerState:
    """Empty ledger seeded with the initial bankroll."""
    return new_state(_validate_amount(initial_bankroll, "initial bankroll"), now)


def find_bet(state: LedgerState, bet_id: str) -> Optional[Bet]:
    for bet in state.bets:
        if bet.id == bet_id:
            return bet
    return None


def set_initial_bankroll(state: LedgerState, amount: float) -> LedgerState:
    """
    Replace the initial bankroll, keeping realized profit/loss.

    The seed point keeps its date; every later balance shifts by the
    difference between the new and old amounts.
    """
    amount = _validate_amount(amount, "initial bankroll")
    return new_state(amount, state.seed_date, state.bets)


def add_bet(
    state: LedgerState,
    bet_input: BetInput,
    bet_id: Optional[str] = None,
) -> Tuple[LedgerState, Bet]:
    """
    Assign an id and prepend the bet (most-recent-first).

    Raises:
        DuplicateBetError: If bet_id is given and already in the ledger
    """
    if bet_id is not None and find_bet(state, bet_id) is not None:
        raise DuplicateBetError(bet_id)
    bet = Bet(id=bet_id or str(uuid.uuid4()), **dataclasses.asdict(bet_input))
    return new_state(state.initial_bankroll, state.seed_date, (bet,) + state.bets), bet


def edit_bet(state: LedgerState, bet_id: str, **changes) -> Tuple[LedgerState, bool]:
    """
    Merge changes into a bet.

    Unspecified fields keep their values. Returns (state, False) unchanged
    when bet_id is not in the ledger.

    Raises:
        TypeError: If changes name a field that is not editable
    """
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise TypeError(f"Cannot edit bet field(s): {', '.join(sorted(unknown))}")

    if find_bet(state, bet_id) is None:
        return state, False

    bets = tuple(
        dataclasses.replace(bet, **changes) if bet.id == bet_id else bet
        for bet in state.bets
    )
    return new_state(state.initial_bankroll, state.seed_date, bets), True


def delete_bet(state: LedgerState, bet_id: str) -> Tuple[LedgerState, bool]:
    """Remove a bet. Returns (state, False) unchanged for unknown ids."""
    if find_bet(state, bet_id) is None:
        return state, False

    bets = tuple(bet for bet in state.bets if bet.id != bet_id)
    return new_state(state.initial_bankroll, state.seed_date, bets), True


def reset_history(state: LedgerState, now: Optional[datetime] = None) -> LedgerState:
    """Drop every bet and reseed the history at now."""
    return new_state(state.initial_bankroll, now)


def settle_bet(
    state: LedgerState,
    bet_id: str,
    outcome: Union[Outcome, str],
) -> Tuple[LedgerState, bool]:
    """Resolve a bet with the profit/loss implied by its odds."""
    bet = find_bet(state, bet_id)
    if bet is None:
        return state, False

    outcome = Outcome(outcome)
    profit_loss = calculate_profit_loss(bet.bet_amount, bet.odds, outcome)
    return edit_bet(state, bet_id, outcome=outcome, profit_loss=profit_loss)


def cash_out(state: LedgerState, bet_id: str, amount: float) -> Tuple[LedgerState, bool]:
    """
    Settle a bet early for an arbitrary returned amount.

    profit/loss = amount - stake; recorded as a win when non-negative.
    """
    amount = _validate_amount(amount, "cash-out amount")

    bet = find_bet(state, bet_id)
    if bet is None:
        return state, False

    profit_loss = amount - bet.bet_amount
    outcome = Outcome.WIN if profit_loss >= 0 else Outcome.LOSS
    return edit_bet(state, bet_id, outcome=outcome, profit_loss=profit_loss)
