"""
Per-period betting performance: win rate, P&L and ROI.

Windows are anchored on "now" and have a fixed length per granularity so
charts always get the same number of buckets:

    day   -> last 7 days
    week  -> last 4 weeks
    month -> last 6 months

Empty buckets are kept (zero-filled), oldest first.
"""
import polars as pl
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Dict, Iterable, List, Optional, Union
import logging

from betledger.betting.models import Bet, Outcome, PerformanceMetric, PeriodType

logger = logging.getLogger(__name__)

WINDOW_SIZES = {
    PeriodType.DAY: 7,
    PeriodType.WEEK: 4,
    PeriodType.MONTH: 6,
}

_WEEKDAY_INDEX = {"monday": 0, "sunday": 6}


@dataclass
class PerformanceSummary:
    """Totals across a metrics window."""
    total_bets: int
    win_rate: float
    total_profit_loss: float
    average_roi: float


def start_of_week(day: date, week_start: str = "sunday") -> date:
    offset = (day.weekday() - _WEEKDAY_INDEX[week_start]) % 7
    return day - timedelta(days=offset)


def shift_months(day: date, months: int) -> date:
    """First day of the month `months` away from day's month."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def period_start(day: date, period_type: PeriodType, week_start: str = "sunday") -> date:
    """Start date of the bucket containing day."""
    if period_type is PeriodType.DAY:
        return day
    if period_type is PeriodType.WEEK:
        return start_of_week(day, week_start)
    return day.replace(day=1)


def period_label(start: date, period_type: PeriodType) -> str:
    if period_type is PeriodType.DAY:
        return start.isoformat()
    if period_type is PeriodType.WEEK:
        return f"Week of {start:%b %d, %Y}"
    return f"{start:%B %Y}"


def _window(today: date, period_type: PeriodType, week_start: str) -> List[date]:
    """Bucket start dates, oldest first."""
    size = WINDOW_SIZES[period_type]
    if period_type is PeriodType.DAY:
        return [today - timedelta(days=i) for i in range(size - 1, -1, -1)]
    if period_type is PeriodType.WEEK:
        return [
            start_of_week(today - timedelta(days=7 * i), week_start)
            for i in range(size - 1, -1, -1)
        ]
    return [shift_months(today, -i) for i in range(size - 1, -1, -1)]


def _lookback_start(today: date, period_type: PeriodType, week_start: str) -> date:
    if period_type is PeriodType.DAY:
        return today - timedelta(days=6)
    if period_type is PeriodType.WEEK:
        return start_of_week(today - timedelta(days=28), week_start)
    return shift_months(today, -6)


def _local_date(moment: datetime, tz: tzinfo) -> date:
    return moment.astimezone(tz).date()


def _stake_in_period(
    bets: Iterable[Bet],
    start: date,
    period_type: PeriodType,
    tz: tzinfo,
    week_start: str,
) -> float:
    """Total stake of every bet (pending included) in the bucket starting at start."""
    return sum(
        bet.bet_amount
        for bet in bets
        if period_start(_local_date(bet.date, tz), period_type, week_start) == start
    )


def calculate_performance_metrics(
    bets: Iterable[Bet],
    period_type: Union[PeriodType, str],
    now: Optional[datetime] = None,
    week_start: str = "sunday",
) -> List[PerformanceMetric]:
    """
    Bucket settled bets into the fixed window ending at now.

    Args:
        bets: Bet collection (any order)
        period_type: day, week or month
        now: Window anchor; defaults to the current local time. Bet dates
            are bucketed in now's timezone (UTC when now is naive).
        week_start: "sunday" or "monday"

    Returns:
        One PerformanceMetric per period, oldest first. An empty bet
        collection returns [].
    """
    bets = list(bets)
    if not bets:
        return []

    period_type = PeriodType(period_type)
    if week_start not in _WEEKDAY_INDEX:
        raise ValueError(f"Unknown week start: {week_start}")

    if now is None:
        now = datetime.now().astimezone()
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    tz = now.tzinfo
    today = now.date()

    metrics: Dict[date, PerformanceMetric] = {
        start: PerformanceMetric(period=period_label(start, period_type), period_start=start)
        for start in _window(today, period_type, week_start)
    }
    lookback = _lookback_start(today, period_type, week_start)

    for bet in bets:
        bet_day = _local_date(bet.date, tz)
        if bet_day < lookback or bet.outcome is Outcome.PENDING:
            continue

        metric = metrics.get(period_start(bet_day, period_type, week_start))
        if metric is None:
            continue

        metric.bets_count += 1
        if bet.outcome is Outcome.WIN:
            metric.win_count += 1
        else:
            metric.loss_count += 1
        metric.profit_loss += bet.profit_loss

    for start, metric in metrics.items():
        if metric.bets_count > 0:
            metric.win_rate = metric.win_count / metric.bets_count
            metric.total_stake = _stake_in_period(bets, start, period_type, tz, week_start)
            metric.roi = metric.profit_loss / metric.total_stake if metric.total_stake > 0 else 0.0

    logger.debug(f"Computed {len(metrics)} {period_type.value} metrics from {len(bets)} bets")
    return list(metrics.values())


def summarize_metrics(metrics: List[PerformanceMetric]) -> PerformanceSummary:
    """Window totals: bet count, overall win rate, P&L and mean per-period ROI."""
    total_bets = sum(m.bets_count for m in metrics)
    wins = sum(m.win_count for m in metrics)
    return PerformanceSummary(
        total_bets=total_bets,
        win_rate=wins / total_bets if total_bets else 0.0,
        total_profit_loss=sum(m.profit_loss for m in metrics),
        average_roi=sum(m.roi for m in metrics) / len(metrics) if metrics else 0.0,
    )


def metrics_frame(metrics: List[PerformanceMetric]) -> pl.DataFrame:
    """Metrics as a DataFrame with percentage columns and cumulative P&L."""
    if not metrics:
        return pl.DataFrame()

    return pl.DataFrame([m.to_dict() for m in metrics]).with_columns([
        (pl.col("win_rate") * 100).round(1).alias("win_rate_pct"),
        (pl.col("roi") * 100).round(1).alias("roi_pct"),
        pl.col("profit_loss").cum_sum().alias("cumulative_profit_loss"),
    ])
