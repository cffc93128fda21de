"""
Stateful ledger container.

LedgerStore owns one LedgerState and applies the pure mutators from
betledger.betting.ledger to it. Reads return immutable snapshots.
"""
from datetime import datetime
from typing import Optional, Tuple, Union
import logging

from betledger.betting import ledger
from betledger.betting.ledger import LedgerState
from betledger.betting.models import BankrollPoint, Bet, BetInput, Outcome, to_utc
from betledger.exceptions import BetNotFoundError, SnapshotError
from betledger.utils.observability import LedgerMetrics

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


class LedgerStore:
    """
    Single source of truth for bets, bankroll and bankroll history.

    Mutations addressed to an unknown bet id (edit, delete, settle,
    cash-out) are no-ops that return False and log a warning.

    Example:
        store = LedgerStore(initial_bankroll=1000)
        bet = store.add_bet(BetInput(date=..., description="Lakers ML",
                                     bet_amount=100, odds=150,
                                     outcome="win", profit_loss=150))
        store.current_bankroll  # 1150.0
    """

    def __init__(
        self,
        initial_bankroll: float = 1000.0,
        metrics: Optional[LedgerMetrics] = None,
        state: Optional[LedgerState] = None,
    ):
        self._state = state if state is not None else ledger.new_ledger(initial_bankroll)
        self.metrics = metrics
        if self.metrics:
            self.metrics.current_bankroll.set(self._state.current_bankroll)
            self.metrics.bets_total.set(len(self._state.bets))

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> LedgerState:
        return self._state

    @property
    def bets(self) -> Tuple[Bet, ...]:
        return self._state.bets

    @property
    def bankroll_history(self) -> Tuple[BankrollPoint, ...]:
        return self._state.bankroll_history

    @property
    def current_bankroll(self) -> float:
        return self._state.current_bankroll

    @property
    def initial_bankroll(self) -> float:
        return self._state.initial_bankroll

    def get_bet(self, bet_id: str) -> Bet:
        """
        Look up a bet by id.

        Raises:
            BetNotFoundError: If no bet has this id
        """
        bet = ledger.find_bet(self._state, bet_id)
        if bet is None:
            raise BetNotFoundError(bet_id)
        return bet

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _commit(self, state: LedgerState, operation: str) -> None:
        self._state = state
        if self.metrics:
            self.metrics.record_mutation(operation, state.current_bankroll, len(state.bets))

    def _missing(self, bet_id: str, operation: str) -> bool:
        logger.warning(f"{operation}: no bet found with id {bet_id}")
        if self.metrics:
            self.metrics.record_not_found(operation)
        return False

    def set_initial_bankroll(self, amount: float) -> None:
        """Rebase the ledger on a new initial bankroll (must be > 0)."""
        old = self._state.initial_bankroll
        self._commit(ledger.set_initial_bankroll(self._state, amount), "set_initial")
        logger.info(f"Initial bankroll {old:.2f} -> {self.initial_bankroll:.2f}")

    def add_bet(self, bet_input: BetInput) -> Bet:
        """Log a bet; returns it with its assigned id."""
        state, bet = ledger.add_bet(self._state, bet_input)
        self._commit(state, "add")
        logger.info(
            f"Added bet {bet.id}: {bet.bet_amount:.2f} @ {bet.odds:+g} "
            f"({bet.outcome.value}, {bet.profit_loss:+.2f})"
        )
        return bet

    def edit_bet(self, bet_id: str, **changes) -> bool:
        """Merge field changes into a bet. False if the id is unknown."""
        state, found = ledger.edit_bet(self._state, bet_id, **changes)
        if not found:
            return self._missing(bet_id, "edit")
        self._commit(state, "edit")
        logger.info(f"Edited bet {bet_id}: {', '.join(sorted(changes))}")
        return True

    def delete_bet(self, bet_id: str) -> bool:
        """Remove a bet. False if the id is unknown."""
        state, found = ledger.delete_bet(self._state, bet_id)
        if not found:
            return self._missing(bet_id, "delete")
        self._commit(state, "delete")
        logger.info(f"Deleted bet {bet_id}")
        return True

    def settle_bet(self, bet_id: str, outcome: Union[Outcome, str]) -> bool:
        """Resolve a bet as win/loss at its odds. False if the id is unknown."""
        state, found = ledger.settle_bet(self._state, bet_id, outcome)
        if not found:
            return self._missing(bet_id, "settle")
        self._commit(state, "settle")
        logger.info(f"Settled bet {bet_id}: {Outcome(outcome).value}")
        return True

    def cash_out(self, bet_id: str, amount: float) -> bool:
        """Settle a bet for a returned amount. False if the id is unknown."""
        state, found = ledger.cash_out(self._state, bet_id, amount)
        if not found:
            return self._missing(bet_id, "cash_out")
        self._commit(state, "cash_out")
        logger.info(f"Cashed out bet {bet_id} for {float(amount):.2f}")
        return True

    def reset_history(self, now: Optional[datetime] = None) -> None:
        """Clear all bets and reseed the history at the initial bankroll."""
        self._commit(ledger.reset_history(self._state, now), "reset")
        logger.info(f"Ledger reset to {self.initial_bankroll:.2f}")

    # ------------------------------------------------------------------
    # Snapshot / restore
    # ------------------------------------------------------------------

    def snapshot(self) -> dict:
        """JSON-ready copy of the ledger state."""
        return {
            "version": SNAPSHOT_VERSION,
            "initial_bankroll": self._state.initial_bankroll,
            "seed_date": self._state.seed_date.isoformat(),
            "bets": [bet.to_dict() for bet in self._state.bets],
        }

    @classmethod
    def from_snapshot(cls, data: dict, metrics: Optional[LedgerMetrics] = None) -> "LedgerStore":
        """
        Restore a store from snapshot().

        Raises:
            SnapshotError: If the snapshot is malformed
        """
        if not isinstance(data, dict):
            raise SnapshotError(f"Snapshot must be a mapping, got {type(data).__name__}")

        version = data.get("version", SNAPSHOT_VERSION)
        if version != SNAPSHOT_VERSION:
            raise SnapshotError(f"Unsupported snapshot version: {version}")

        try:
            initial = float(data["initial_bankroll"])
            seed_date = to_utc(data["seed_date"])
            bets = tuple(Bet(**raw) for raw in data.get("bets", []))
        except (KeyError, TypeError, ValueError) as e:
            raise SnapshotError(f"Malformed snapshot: {e}") from e

        if not initial > 0:
            raise SnapshotError(f"Snapshot initial bankroll must be > 0, got {initial}")

        ids = [bet.id for bet in bets]
        if len(ids) != len(set(ids)):
            raise SnapshotError("Snapshot contains duplicate bet ids")

        return cls(state=ledger.new_state(initial, seed_date, bets), metrics=metrics)
