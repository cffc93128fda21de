"""
Unit tests for per-period performance metrics.
"""
import pytest
import polars as pl
from datetime import date, datetime, timedelta, timezone

from betledger.betting import Bet, Outcome, calculate_performance_metrics, metrics_frame, summarize_metrics
from betledger.betting.performance import shift_months, start_of_week


def _bet(when, outcome=Outcome.WIN, bet_amount=100.0, profit_loss=None, bet_id=None):
    if profit_loss is None:
        profit_loss = {Outcome.WIN: 150.0, Outcome.LOSS: -bet_amount, Outcome.PENDING: 0.0}[outcome]
    return Bet(
        id=bet_id or f"bet-{when.isoformat()}-{outcome.value}",
        date=when,
        description="test",
        bet_amount=bet_amount,
        odds=150.0,
        outcome=outcome,
        profit_loss=profit_loss,
    )


class TestCalendarHelpers:
    
    def test_start_of_week(self):
        wednesday = date(2026, 3, 18)
        assert start_of_week(wednesday, "sunday") == date(2026, 3, 15)
        assert start_of_week(wednesday, "monday") == date(2026, 3, 16)
        assert start_of_week(date(2026, 3, 15), "sunday") == date(2026, 3, 15)
    
    def test_shift_months_across_years(self):
        assert shift_months(date(2026, 3, 31), -5) == date(2025, 10, 1)
        assert shift_months(date(2026, 1, 15), -1) == date(2025, 12, 1)
        assert shift_months(date(2025, 12, 2), 1) == date(2026, 1, 1)


class TestCalculatePerformanceMetrics:
    
    def test_no_bets(self, now):
        for period in ("day", "week", "month"):
            assert calculate_performance_metrics([], period, now=now) == []
    
    @pytest.mark.parametrize("period,expected", [("day", 7), ("week", 4), ("month", 6)])
    def test_constant_length_with_gaps(self, now, period, expected):
        """Bets outside the window still yield a zero-filled window."""
        old = _bet(now - timedelta(days=400))
        metrics = calculate_performance_metrics([old], period, now=now)
        assert len(metrics) == expected
        assert all(m.bets_count == 0 for m in metrics)
    
    def test_daily_buckets(self, now):
        bets = [
            _bet(now - timedelta(hours=2), Outcome.WIN, bet_amount=100.0, profit_loss=150.0),
            _bet(now - timedelta(days=1), Outcome.LOSS, bet_amount=50.0),
            _bet(now - timedelta(hours=1), Outcome.PENDING, bet_amount=20.0),
            _bet(now - timedelta(days=10), Outcome.WIN),
        ]
        metrics = calculate_performance_metrics(bets, "day", now=now)
        
        assert [m.period for m in metrics] == [
            "2026-03-12", "2026-03-13", "2026-03-14", "2026-03-15",
            "2026-03-16", "2026-03-17", "2026-03-18",
        ]
        
        today, yesterday = metrics[-1], metrics[-2]
        assert today.bets_count == 1
        assert today.win_count == 1
        assert today.win_rate == 1.0
        assert today.profit_loss == 150.0
        assert today.total_stake == 120.0  # pending stake counts
        assert today.roi == pytest.approx(150.0 / 120.0)
        
        assert yesterday.loss_count == 1
        assert yesterday.win_rate == 0.0
        assert yesterday.roi == pytest.approx(-1.0)
        
        assert sum(m.bets_count for m in metrics) == 2
    
    def test_roi_stake_includes_pending_bets(self, now):
        bets = [
            _bet(now - timedelta(hours=3), Outcome.WIN, bet_amount=100.0, profit_loss=150.0),
            _bet(now - timedelta(hours=1), Outcome.PENDING, bet_amount=100.0),
        ]
        today = calculate_performance_metrics(bets, "day", now=now)[-1]
        
        assert today.bets_count == 1
        assert today.total_stake == 200.0
        assert today.roi == pytest.approx(0.75)
    
    def test_weekly_labels_sunday_start(self, now):
        metrics = calculate_performance_metrics([_bet(now)], "week", now=now)
        assert [m.period for m in metrics] == [
            "Week of Feb 22, 2026",
            "Week of Mar 01, 2026",
            "Week of Mar 08, 2026",
            "Week of Mar 15, 2026",
        ]
        assert metrics[-1].bets_count == 1
    
    def test_weekly_monday_start(self, now):
        sunday = datetime(2026, 3, 15, 18, 0, tzinfo=timezone.utc)
        bets = [_bet(sunday, Outcome.LOSS)]
        
        sunday_start = calculate_performance_metrics(bets, "week", now=now, week_start="sunday")
        monday_start = calculate_performance_metrics(bets, "week", now=now, week_start="monday")
        
        assert sunday_start[-1].bets_count == 1
        assert monday_start[-1].period == "Week of Mar 16, 2026"
        assert monday_start[-1].bets_count == 0
        assert monday_start[-2].bets_count == 1
    
    def test_weekly_aggregation(self, now):
        bets = [
            _bet(now - timedelta(days=1), Outcome.WIN, bet_amount=100.0, profit_loss=90.0),
            _bet(now - timedelta(days=2), Outcome.LOSS, bet_amount=100.0),
            _bet(now - timedelta(days=3), Outcome.WIN, bet_amount=50.0, profit_loss=50.0),
            _bet(now - timedelta(days=9), Outcome.LOSS, bet_amount=30.0),
        ]
        metrics = calculate_performance_metrics(bets, "week", now=now)
        this_week, last_week = metrics[-1], metrics[-2]
        
        assert this_week.bets_count == 3
        assert this_week.win_rate == pytest.approx(2 / 3)
        assert this_week.profit_loss == pytest.approx(40.0)
        assert this_week.roi == pytest.approx(40.0 / 250.0)
        assert last_week.loss_count == 1
        assert last_week.roi == pytest.approx(-1.0)
    
    def test_monthly_window(self, now):
        bets = [
            _bet(datetime(2025, 10, 2, tzinfo=timezone.utc), Outcome.WIN),
            _bet(datetime(2025, 9, 28, tzinfo=timezone.utc), Outcome.WIN),
            _bet(datetime(2026, 3, 1, tzinfo=timezone.utc), Outcome.LOSS, bet_amount=40.0),
        ]
        metrics = calculate_performance_metrics(bets, "month", now=now)
        
        assert [m.period for m in metrics] == [
            "October 2025", "November 2025", "December 2025",
            "January 2026", "February 2026", "March 2026",
        ]
        assert metrics[0].bets_count == 1
        assert metrics[-1].profit_loss == -40.0
        assert sum(m.bets_count for m in metrics) == 2
    
    def test_buckets_in_anchor_timezone(self):
        """A bet late in the local evening lands on the local day, not the UTC day."""
        eastern = timezone(timedelta(hours=-5))
        now = datetime(2026, 3, 18, 12, 0, tzinfo=eastern)
        bet = _bet(datetime(2026, 3, 18, 2, 0, tzinfo=timezone.utc))  # Mar 17 21:00 local
        
        metrics = calculate_performance_metrics([bet], "day", now=now)
        assert metrics[-2].period == "2026-03-17"
        assert metrics[-2].bets_count == 1
        assert metrics[-1].bets_count == 0
    
    def test_naive_now_is_utc(self, now):
        naive = now.replace(tzinfo=None)
        metrics = calculate_performance_metrics([_bet(now)], "day", now=naive)
        assert metrics[-1].bets_count == 1
    
    def test_zero_stake_roi(self, now):
        free_bet = _bet(now, Outcome.WIN, bet_amount=0.0, profit_loss=25.0)
        metrics = calculate_performance_metrics([free_bet], "day", now=now)
        assert metrics[-1].roi == 0.0
    
    def test_unknown_period_type(self, now):
        with pytest.raises(ValueError):
            calculate_performance_metrics([_bet(now)], "year", now=now)
    
    def test_unknown_week_start(self, now):
        with pytest.raises(ValueError):
            calculate_performance_metrics([_bet(now)], "week", now=now, week_start="friday")


class TestSummaries:
    
    @pytest.fixture
    def metrics(self, now):
        bets = [
            _bet(now, Outcome.WIN, bet_amount=100.0, profit_loss=100.0),
            _bet(now - timedelta(days=1), Outcome.LOSS, bet_amount=100.0),
            _bet(now - timedelta(days=1, hours=1), Outcome.WIN, bet_amount=100.0, profit_loss=50.0),
        ]
        return calculate_performance_metrics(bets, "day", now=now)
    
    def test_summarize(self, metrics):
        summary = summarize_metrics(metrics)
        assert summary.total_bets == 3
        assert summary.win_rate == pytest.approx(2 / 3)
        assert summary.total_profit_loss == pytest.approx(50.0)
        # today: +1.0, yesterday: -50/200
        assert summary.average_roi == pytest.approx((1.0 - 0.25) / 7)
    
    def test_summarize_empty(self):
        summary = summarize_metrics([])
        assert summary.total_bets == 0
        assert summary.win_rate == 0.0
        assert summary.average_roi == 0.0
    
    def test_metrics_frame(self, metrics):
        df = metrics_frame(metrics)
        assert isinstance(df, pl.DataFrame)
        assert len(df) == 7
        assert {"period", "roi_pct", "win_rate_pct", "cumulative_profit_loss"} <= set(df.columns)
        assert df["cumulative_profit_loss"].to_list()[-1] == pytest.approx(50.0)
        assert df["roi_pct"].to_list()[-1] == pytest.approx(100.0)
    
    def test_metrics_frame_empty(self):
        assert metrics_frame([]).is_empty()
