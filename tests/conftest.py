# tests/conftest.py
import pytest
from datetime import datetime, timedelta, timezone

from betledger.betting import BetInput, LedgerStore, Outcome
from betledger.betting.ledger import new_ledger


# Markers for test categorization
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "e2e: marks tests as end-to-end tests")


@pytest.fixture
def now():
    """Fixed clock: Wednesday 2026-03-18 12:00 UTC."""
    return datetime(2026, 3, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def seed_date(now):
    """Ledger creation time, well before the sample bets."""
    return now - timedelta(days=30)


@pytest.fixture
def make_bet():
    """Factory for BetInput with sensible defaults."""
    def _make(
        date,
        bet_amount=100.0,
        odds=150.0,
        outcome=Outcome.PENDING,
        profit_loss=0.0,
        description="Lakers ML",
        category=None,
        tipster=None,
    ):
        return BetInput(
            date=date,
            description=description,
            bet_amount=bet_amount,
            odds=odds,
            outcome=outcome,
            profit_loss=profit_loss,
            category=category,
            tipster=tipster,
        )
    return _make


@pytest.fixture
def ledger_state(seed_date):
    """Empty ledger with a 1000 bankroll."""
    return new_ledger(1000.0, now=seed_date)


@pytest.fixture
def store(ledger_state):
    """LedgerStore over an empty 1000 ledger."""
    return LedgerStore(state=ledger_state)
