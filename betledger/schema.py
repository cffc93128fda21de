"""
Input validation at the caller boundary.

The ledger engine does not re-validate bets; callers build a BetForm (or
validate equivalently) before calling LedgerStore.add_bet.
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, Union
from datetime import datetime

from betledger.betting.models import BetInput, OddsFormat, Outcome, utc_now
from betledger.betting.odds import calculate_profit_loss, convert_odds, to_decimal


class BetForm(BaseModel):
    """
    A bet as entered by a user, odds in any supported format.
    """
    description: str = Field(min_length=1, description="What was bet on")
    bet_amount: float = Field(gt=0, description="Stake")
    odds: Union[float, str] = Field(description="Odds in odds_format (e.g. -110, 1.91, 10/11)")
    odds_format: OddsFormat = Field(default=OddsFormat.AMERICAN)
    date: datetime = Field(default_factory=utc_now)
    outcome: Outcome = Field(default=Outcome.PENDING)
    category: Optional[str] = None
    tipster: Optional[str] = None
    
    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Description is required")
        return v.strip()
    
    @field_validator("category", "tipster")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()
    
    @model_validator(mode="after")
    def odds_parse(self):
        # Raises OddsConversionError (a ValueError) for unusable odds
        to_decimal(self.odds, self.odds_format)
        return self
    
    @property
    def american_odds(self) -> float:
        if self.odds_format is OddsFormat.AMERICAN:
            return float(self.odds)
        return float(convert_odds(self.odds, self.odds_format, OddsFormat.AMERICAN))
    
    def to_bet_input(self) -> BetInput:
        """Ledger input with American odds and the outcome's profit/loss."""
        return BetInput(
            date=self.date,
            description=self.description,
            bet_amount=self.bet_amount,
            odds=self.american_odds,
            outcome=self.outcome,
            profit_loss=calculate_profit_loss(self.bet_amount, self.odds, self.outcome, self.odds_format),
            category=self.category,
            tipster=self.tipster,
        )
