"""
Odds conversion and payout math.

Bets are stored in American odds; decimal odds are the intermediate for every
conversion. All functions are pure and raise OddsConversionError at the
arithmetic boundaries (zero American odds, decimal odds <= 1, bad fractions).
"""
import math
from fractions import Fraction
from typing import Union

from betledger.betting.models import OddsFormat, Outcome
from betledger.exceptions import OddsConversionError

OddsValue = Union[int, float, str]

DEFAULT_MAX_DENOMINATOR = 100


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def american_to_decimal(odds: float) -> float:
    """
    Convert American odds to decimal odds.
    
    +150 -> 2.5, -110 -> 1.909...
    """
    odds = float(odds)
    if odds == 0 or math.isnan(odds):
        raise OddsConversionError(f"American odds must be non-zero, got {odds}")
    if odds > 0:
        return odds / 100 + 1
    return 100 / abs(odds) + 1


def decimal_to_american(decimal: float) -> int:
    """
    Convert decimal odds to (rounded) American odds.
    
    2.5 -> +150, 1.909 -> -110
    """
    decimal = float(decimal)
    if not decimal > 1:
        raise OddsConversionError(f"Decimal odds must be greater than 1, got {decimal}")
    if decimal >= 2:
        return _round_half_up((decimal - 1) * 100)
    return _round_half_up(-100 / (decimal - 1))


def fractional_to_decimal(fractional: str) -> float:
    """Convert "num/den" fractional odds to decimal odds."""
    text = str(fractional).strip()
    try:
        num_text, den_text = text.split("/")
        numerator = float(num_text)
        denominator = float(den_text)
    except ValueError:
        raise OddsConversionError(f"Fractional odds must look like 'num/den', got {fractional!r}")
    
    if denominator <= 0:
        raise OddsConversionError(f"Fractional odds denominator must be positive, got {fractional!r}")
    if numerator <= 0:
        raise OddsConversionError(f"Fractional odds numerator must be positive, got {fractional!r}")
    return numerator / denominator + 1


def decimal_to_fractional(decimal: float, max_denominator: int = DEFAULT_MAX_DENOMINATOR) -> str:
    """
    Convert decimal odds to a reduced "num/den" fraction.
    
    The profit multiple (decimal - 1) is reduced to the closest fraction
    whose denominator does not exceed max_denominator: 2.5 -> "3/2",
    1.909... -> "10/11".
    """
    decimal = float(decimal)
    if not decimal > 1:
        raise OddsConversionError(f"Decimal odds must be greater than 1, got {decimal}")
    profit = Fraction(decimal - 1).limit_denominator(max_denominator)
    if profit == 0:
        # Below 1/max_denominator; keep the smallest representable price
        profit = Fraction(1, max_denominator)
    return f"{profit.numerator}/{profit.denominator}"


def to_decimal(value: OddsValue, odds_format: Union[OddsFormat, str]) -> float:
    """Convert odds in any supported format to decimal odds."""
    odds_format = OddsFormat(odds_format)
    
    if odds_format is OddsFormat.AMERICAN:
        return american_to_decimal(_as_float(value))
    if odds_format is OddsFormat.FRACTIONAL:
        return fractional_to_decimal(value)
    
    decimal = _as_float(value)
    if not decimal > 1:
        raise OddsConversionError(f"Decimal odds must be greater than 1, got {decimal}")
    return decimal


def from_decimal(
    decimal: float,
    odds_format: Union[OddsFormat, str],
    max_denominator: int = DEFAULT_MAX_DENOMINATOR,
) -> OddsValue:
    """Convert decimal odds to the requested format."""
    odds_format = OddsFormat(odds_format)
    
    if odds_format is OddsFormat.AMERICAN:
        return decimal_to_american(decimal)
    if odds_format is OddsFormat.FRACTIONAL:
        return decimal_to_fractional(decimal, max_denominator)
    return float(decimal)


def convert_odds(
    value: OddsValue,
    from_format: Union[OddsFormat, str],
    to_format: Union[OddsFormat, str],
    max_denominator: int = DEFAULT_MAX_DENOMINATOR,
) -> OddsValue:
    """
    Convert odds between formats, routing through decimal.
    
    Args:
        value: Odds in from_format (number, or "num/den" for fractional)
        from_format: Source notation
        to_format: Target notation
        max_denominator: Denominator bound for fractional output
    
    Returns:
        int for American, float for decimal, "num/den" string for fractional
    """
    return from_decimal(to_decimal(value, from_format), to_format, max_denominator)


def calculate_potential_win(
    bet_amount: float,
    odds: OddsValue,
    odds_format: Union[OddsFormat, str] = OddsFormat.AMERICAN,
) -> float:
    """Net win (total return minus stake) if the bet wins."""
    return bet_amount * (to_decimal(odds, odds_format) - 1)


def calculate_profit_loss(
    bet_amount: float,
    odds: OddsValue,
    outcome: Union[Outcome, str],
    odds_format: Union[OddsFormat, str] = OddsFormat.AMERICAN,
) -> float:
    """Profit/loss implied by the odds for a given outcome."""
    outcome = Outcome(outcome)
    if outcome is Outcome.PENDING:
        return 0.0
    if outcome is Outcome.WIN:
        return calculate_potential_win(bet_amount, odds, odds_format)
    return -bet_amount


def format_american_odds(odds: float) -> str:
    """Signed American odds string: +150, -110."""
    value = float(odds)
    if value.is_integer():
        value = int(value)
    return f"+{value}" if value > 0 else str(value)


def _as_float(value: OddsValue) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise OddsConversionError(f"Odds must be numeric, got {value!r}")
