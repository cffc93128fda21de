"""
Ledger domain objects: bets, bankroll points and performance buckets.
"""
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional, Union


class Outcome(str, Enum):
    """Bet resolution state."""
    WIN = "win"
    LOSS = "loss"
    PENDING = "pending"


class OddsFormat(str, Enum):
    """Supported odds notations."""
    AMERICAN = "american"
    DECIMAL = "decimal"
    FRACTIONAL = "fractional"


class PeriodType(str, Enum):
    """Granularity of performance buckets."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


def to_utc(value: Union[str, datetime]) -> datetime:
    """
    Normalize an ISO string or datetime to an aware UTC datetime.
    
    Naive values are taken to be UTC already. A trailing "Z" is accepted.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    elif not isinstance(value, datetime):
        raise TypeError(f"Expected an ISO string or datetime, got {type(value).__name__}")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class BetInput:
    """A bet as entered by the caller, before the ledger assigns an id."""
    date: datetime
    description: str
    bet_amount: float
    odds: float  # American
    outcome: Outcome = Outcome.PENDING
    profit_loss: float = 0.0
    category: Optional[str] = None
    tipster: Optional[str] = None
    
    def __post_init__(self):
        # Frozen: normalize through object.__setattr__
        object.__setattr__(self, "date", to_utc(self.date))
        object.__setattr__(self, "outcome", Outcome(self.outcome))


@dataclass(frozen=True)
class Bet:
    """A logged wager. Edits produce a new instance with the same id."""
    id: str
    date: datetime
    description: str
    bet_amount: float
    odds: float  # American
    outcome: Outcome
    profit_loss: float
    category: Optional[str] = None
    tipster: Optional[str] = None
    
    def __post_init__(self):
        object.__setattr__(self, "date", to_utc(self.date))
        object.__setattr__(self, "outcome", Outcome(self.outcome))
    
    @property
    def is_settled(self) -> bool:
        return self.outcome is not Outcome.PENDING
    
    @property
    def realized_profit_loss(self) -> float:
        """Profit/loss counted towards the bankroll (0 while pending)."""
        return self.profit_loss if self.is_settled else 0.0
    
    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "description": self.description,
            "bet_amount": self.bet_amount,
            "odds": self.odds,
            "outcome": self.outcome.value,
            "profit_loss": self.profit_loss,
            "category": self.category,
            "tipster": self.tipster,
        }


@dataclass(frozen=True)
class BankrollPoint:
    """Balance sample at a point in time."""
    date: datetime
    balance: float


@dataclass
class PerformanceMetric:
    """Aggregated results for one period bucket."""
    period: str
    period_start: date
    bets_count: int = 0
    win_count: int = 0
    loss_count: int = 0
    win_rate: float = 0.0
    profit_loss: float = 0.0
    total_stake: float = 0.0
    roi: float = 0.0
    
    def to_dict(self) -> dict:
        return {
            "period": self.period,
            "period_start": self.period_start,
            "bets_count": self.bets_count,
            "win_count": self.win_count,
            "loss_count": self.loss_count,
            "win_rate": self.win_rate,
            "profit_loss": self.profit_loss,
            "total_stake": self.total_stake,
            "roi": self.roi,
        }
