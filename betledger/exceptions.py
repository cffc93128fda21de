"""
Custom exceptions for the betting ledger.
"""


class BetLedgerError(Exception):
    """Base exception for all custom errors."""
    pass


# Odds Errors
class OddsConversionError(BetLedgerError, ValueError):
    """Raised when odds cannot be converted (zero American odds, decimal <= 1, bad fraction)."""
    pass


# Ledger Errors
class LedgerError(BetLedgerError):
    """Base exception for ledger-related errors."""
    pass


class InvalidAmountError(LedgerError, ValueError):
    """Raised when a bankroll or cash-out amount is not positive."""
    def __init__(self, amount: float = None, field: str = "amount"):
        self.amount = amount
        self.field = field
        msg = f"Invalid {field}"
        if amount is not None:
            msg += f": {amount!r} (must be > 0)"
        super().__init__(msg)


class BetNotFoundError(LedgerError, LookupError):
    """Raised when a bet id is not in the ledger."""
    def __init__(self, bet_id: str = None):
        self.bet_id = bet_id
        msg = "Bet not found"
        if bet_id:
            msg += f": {bet_id}"
        super().__init__(msg)


class DuplicateBetError(LedgerError, ValueError):
    """Raised when a new bet reuses an id already in the ledger."""
    def __init__(self, bet_id: str = None):
        self.bet_id = bet_id
        super().__init__(f"Bet id already in use: {bet_id}")


# Persistence Errors
class SnapshotError(BetLedgerError):
    """Raised when a ledger snapshot cannot be read or restored."""
    pass


# Configuration Errors
class ConfigurationError(BetLedgerError):
    """Raised when configuration is invalid or missing."""
    pass
