#!/usr/bin/env python
"""
Bet Tracker - command-line front end for the betting ledger.

State lives in a JSON snapshot (settings.ledger_path, or --ledger).
"""
import argparse
import os
import sys
import time
import uuid
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from betledger.betting import (
    LedgerStore,
    OddsFormat,
    Outcome,
    PeriodType,
    calculate_performance_metrics,
    filter_bets,
    history_in_range,
    metrics_frame,
    summarize_metrics,
)
from betledger.betting.filters import HISTORY_RANGES
from betledger.betting.odds import calculate_profit_loss, convert_odds, format_american_odds
from betledger.config import settings
from betledger.exceptions import BetLedgerError
from betledger.schema import BetForm
from betledger.storage import SnapshotStore
from betledger.utils import CORRELATION_ID, Logger, initialize_observability, setup_logging

ENVIRONMENT = os.getenv('ENVIRONMENT', settings.observability.environment)

logger = Logger(__name__)


def _snapshots(args) -> SnapshotStore:
    return SnapshotStore(Path(args.ledger) if args.ledger else settings.ledger_path)


def _load_store(args) -> LedgerStore:
    store = _snapshots(args).load(metrics=args.metrics)
    if store is None:
        store = LedgerStore(initial_bankroll=settings.ledger.initial_bankroll, metrics=args.metrics)
    return store


def _display_odds(american: float, odds_format: str) -> str:
    if odds_format == OddsFormat.AMERICAN.value:
        return format_american_odds(american)
    value = convert_odds(
        american, OddsFormat.AMERICAN, odds_format,
        max_denominator=settings.ledger.fractional_max_denominator,
    )
    return f"{value:.2f}" if isinstance(value, float) else str(value)


def _to_american(odds: str, odds_format: str) -> float:
    if odds_format == OddsFormat.AMERICAN.value:
        return float(odds)
    return float(convert_odds(odds, odds_format, OddsFormat.AMERICAN))


def _print_bet(bet, odds_format: str) -> None:
    tags = " ".join(f"[{t}]" for t in (bet.category, bet.tipster) if t)
    print(
        f"  {bet.id[:8]}  {bet.date.astimezone():%Y-%m-%d %H:%M}  {bet.outcome.value:<7} "
        f"{bet.bet_amount:>9.2f} @ {_display_odds(bet.odds, odds_format):>7}  "
        f"P/L {bet.profit_loss:>+9.2f}  {bet.description} {tags}".rstrip()
    )


def _local(moment: datetime) -> datetime:
    """Naive CLI times are local wall-clock times."""
    return moment.astimezone() if moment.tzinfo is None else moment


def _resolve_id(store: LedgerStore, prefix: str) -> str:
    """Accept a full id or an unambiguous prefix (as printed by `list`)."""
    matches = [bet.id for bet in store.bets if bet.id.startswith(prefix)]
    return matches[0] if len(matches) == 1 else prefix


def cmd_init(args):
    """Create the ledger or change its initial bankroll."""
    store = _load_store(args)
    store.set_initial_bankroll(args.bankroll)
    _snapshots(args).save(store)
    logger.log_event('initial_bankroll_set', amount=args.bankroll)
    print(f"Initial bankroll: {store.initial_bankroll:.2f} | Current: {store.current_bankroll:.2f}")


def cmd_add(args):
    """Log a new bet."""
    form = BetForm(
        description=args.description,
        bet_amount=args.amount,
        odds=args.odds,
        odds_format=args.format,
        date=_local(args.date) if args.date else datetime.now().astimezone(),
        outcome=args.outcome,
        category=args.category,
        tipster=args.tipster,
    )
    store = _load_store(args)
    bet = store.add_bet(form.to_bet_input())
    _snapshots(args).save(store)
    logger.log_event('bet_added', bet_id=bet.id, outcome=bet.outcome.value)
    print(f"Added bet {bet.id}")
    _print_bet(bet, args.format)
    print(f"Bankroll: {store.current_bankroll:.2f}")


def cmd_settle(args):
    """Resolve a pending bet as win or loss."""
    store = _load_store(args)
    bet_id = _resolve_id(store, args.bet_id)
    if not store.settle_bet(bet_id, args.outcome):
        print(f"No bet found with id {args.bet_id}")
        return 1
    _snapshots(args).save(store)
    logger.log_event('bet_settled', bet_id=bet_id, outcome=args.outcome)
    _print_bet(store.get_bet(bet_id), settings.ledger.odds_format)
    print(f"Bankroll: {store.current_bankroll:.2f}")


def cmd_cash_out(args):
    """Settle a bet early for the returned amount."""
    store = _load_store(args)
    bet_id = _resolve_id(store, args.bet_id)
    if not store.cash_out(bet_id, args.amount):
        print(f"No bet found with id {args.bet_id}")
        return 1
    _snapshots(args).save(store)
    logger.log_event('bet_cashed_out', bet_id=bet_id, amount=args.amount)
    _print_bet(store.get_bet(bet_id), settings.ledger.odds_format)
    print(f"Bankroll: {store.current_bankroll:.2f}")


def cmd_edit(args):
    """Change fields of a bet. A new outcome without --profit-loss is priced at the bet's odds."""
    store = _load_store(args)
    bet_id = _resolve_id(store, args.bet_id)

    changes = {}
    if args.description is not None:
        changes["description"] = args.description
    if args.amount is not None:
        changes["bet_amount"] = args.amount
    if args.odds is not None:
        changes["odds"] = _to_american(args.odds, args.format)
    if args.date is not None:
        changes["date"] = _local(args.date)
    if args.category is not None:
        changes["category"] = args.category or None
    if args.tipster is not None:
        changes["tipster"] = args.tipster or None
    if args.outcome is not None:
        changes["outcome"] = Outcome(args.outcome)
    if args.profit_loss is not None:
        changes["profit_loss"] = args.profit_loss
    elif "outcome" in changes:
        bet = store.get_bet(bet_id)
        changes["profit_loss"] = calculate_profit_loss(
            changes.get("bet_amount", bet.bet_amount),
            changes.get("odds", bet.odds),
            changes["outcome"],
        )

    if not changes:
        print("Nothing to change")
        return 1
    if not store.edit_bet(bet_id, **changes):
        print(f"No bet found with id {args.bet_id}")
        return 1
    _snapshots(args).save(store)
    logger.log_event('bet_edited', bet_id=bet_id, fields=sorted(changes))
    _print_bet(store.get_bet(bet_id), settings.ledger.odds_format)
    print(f"Bankroll: {store.current_bankroll:.2f}")


def cmd_delete(args):
    """Remove a bet."""
    store = _load_store(args)
    bet_id = _resolve_id(store, args.bet_id)
    if not store.delete_bet(bet_id):
        print(f"No bet found with id {args.bet_id}")
        return 1
    _snapshots(args).save(store)
    logger.log_event('bet_deleted', bet_id=bet_id)
    print(f"Deleted bet {bet_id} | Bankroll: {store.current_bankroll:.2f}")


def cmd_list(args):
    """List bets, most recent first."""
    store = _load_store(args)
    bets = filter_bets(store.bets, search=args.search, tipster=args.tipster, outcomes=args.outcome)

    print(f"\n=== BETS ({len(bets)} of {len(store.bets)}) ===\n")
    for bet in bets[:args.limit]:
        _print_bet(bet, settings.ledger.odds_format)
    print(f"\nInitial: {store.initial_bankroll:.2f} | Current: {store.current_bankroll:.2f}")


def cmd_history(args):
    """Print the bankroll history."""
    store = _load_store(args)
    points = history_in_range(store.bankroll_history, args.range)

    print(f"\n=== BANKROLL HISTORY ({args.range}) ===\n")
    for point in points:
        print(f"  {point.date.astimezone():%Y-%m-%d %H:%M}  {point.balance:>12.2f}")


def cmd_metrics(args):
    """Print per-period performance."""
    store = _load_store(args)
    metrics = calculate_performance_metrics(
        store.bets, args.period, week_start=settings.ledger.week_start
    )
    if not metrics:
        print("No bets logged yet")
        return

    df = metrics_frame(metrics)

    print(f"\n=== PERFORMANCE ({args.period}) ===\n")
    for row in df.iter_rows(named=True):
        print(
            f"  {row['period']:<24} bets {row['bets_count']:>3}  W {row['win_count']:>3}  "
            f"L {row['loss_count']:>3}  win {row['win_rate_pct']:>5.1f}%  "
            f"P/L {row['profit_loss']:>+9.2f}  ROI {row['roi_pct']:>+6.1f}%  "
            f"cum {row['cumulative_profit_loss']:>+9.2f}"
        )

    summary = summarize_metrics(metrics)
    print(
        f"\nTotal bets: {summary.total_bets} | Win rate: {summary.win_rate * 100:.1f}% | "
        f"Total P/L: {summary.total_profit_loss:+.2f} | Avg. ROI: {summary.average_roi * 100:.1f}%"
    )


def cmd_reset(args):
    """Clear all bets, keeping the initial bankroll."""
    if not args.yes:
        print("Refusing to reset without --yes")
        return 1
    store = _load_store(args)
    store.reset_history()
    _snapshots(args).save(store)
    logger.log_event('ledger_reset')
    print(f"Ledger reset. Bankroll: {store.current_bankroll:.2f}")


def cmd_convert(args):
    """Convert odds between notations."""
    value = convert_odds(
        args.value, args.from_format, args.to_format,
        max_denominator=settings.ledger.fractional_max_denominator,
    )
    if args.to_format == OddsFormat.AMERICAN.value:
        print(format_american_odds(value))
    elif isinstance(value, float):
        print(f"{value:.4f}")
    else:
        print(value)


def main():
    parser = argparse.ArgumentParser(description="Betting Ledger Tracker")
    parser.add_argument("--ledger", help="Ledger snapshot path (default: settings data_dir/ledger_file)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    formats = [f.value for f in OddsFormat]
    outcomes = [o.value for o in Outcome]

    init = subparsers.add_parser("init", help="Set the initial bankroll")
    init.add_argument("--bankroll", type=float, required=True)
    init.set_defaults(func=cmd_init)

    add = subparsers.add_parser("add", help="Log a bet")
    add.add_argument("description")
    add.add_argument("--amount", type=float, required=True)
    add.add_argument("--odds", required=True, help="e.g. -110, 1.91 or 10/11")
    add.add_argument("--format", choices=formats, default=settings.ledger.odds_format)
    add.add_argument("--date", type=datetime.fromisoformat, help="ISO date/time (default: now)")
    add.add_argument("--outcome", choices=outcomes, default=Outcome.PENDING.value)
    add.add_argument("--category")
    add.add_argument("--tipster")
    add.set_defaults(func=cmd_add)

    settle = subparsers.add_parser("settle", help="Resolve a bet at its odds")
    settle.add_argument("bet_id")
    settle.add_argument("outcome", choices=[Outcome.WIN.value, Outcome.LOSS.value])
    settle.set_defaults(func=cmd_settle)

    cash_out = subparsers.add_parser("cash-out", help="Settle a bet for a returned amount")
    cash_out.add_argument("bet_id")
    cash_out.add_argument("amount", type=float)
    cash_out.set_defaults(func=cmd_cash_out)

    edit = subparsers.add_parser("edit", help="Change fields of a bet")
    edit.add_argument("bet_id")
    edit.add_argument("--description")
    edit.add_argument("--amount", type=float)
    edit.add_argument("--odds")
    edit.add_argument("--format", choices=formats, default=settings.ledger.odds_format)
    edit.add_argument("--date", type=datetime.fromisoformat)
    edit.add_argument("--outcome", choices=outcomes)
    edit.add_argument("--profit-loss", type=float)
    edit.add_argument("--category")
    edit.add_argument("--tipster")
    edit.set_defaults(func=cmd_edit)

    delete = subparsers.add_parser("delete", help="Remove a bet")
    delete.add_argument("bet_id")
    delete.set_defaults(func=cmd_delete)

    list_bets = subparsers.add_parser("list", help="List bets")
    list_bets.add_argument("--search", default="")
    list_bets.add_argument("--tipster", default="")
    list_bets.add_argument("--outcome", choices=outcomes, action="append")
    list_bets.add_argument("--limit", type=int, default=50)
    list_bets.set_defaults(func=cmd_list)

    history = subparsers.add_parser("history", help="Bankroll history")
    history.add_argument("--range", choices=list(HISTORY_RANGES), default="all")
    history.set_defaults(func=cmd_history)

    metrics = subparsers.add_parser("metrics", help="Performance by period")
    metrics.add_argument("--period", choices=[p.value for p in PeriodType], default=PeriodType.WEEK.value)
    metrics.set_defaults(func=cmd_metrics)

    reset = subparsers.add_parser("reset", help="Clear all bets")
    reset.add_argument("--yes", action="store_true")
    reset.set_defaults(func=cmd_reset)

    convert = subparsers.add_parser("convert", help="Convert odds between formats")
    convert.add_argument("value")
    convert.add_argument("--from", dest="from_format", choices=formats, default=OddsFormat.AMERICAN.value)
    convert.add_argument("--to", dest="to_format", choices=formats, default=OddsFormat.DECIMAL.value)
    convert.set_defaults(func=cmd_convert)

    args = parser.parse_args()

    setup_logging(level=settings.observability.log_level)
    args.metrics, _ = initialize_observability(environment=ENVIRONMENT)

    CORRELATION_ID.set(str(uuid.uuid4()))
    start_time = time.time()
    exit_code = 0

    try:
        exit_code = args.func(args) or 0
    except (BetLedgerError, ValidationError) as e:
        logger.log_error("command_failed", error=str(e), command=args.command)
        print(f"ERROR: {e}")
        exit_code = 1
    except Exception as e:
        logger.log_error("command_failed", error=str(e), command=args.command, exc_info=True)
        exit_code = 1
    finally:
        duration = time.time() - start_time
        logger.log_event('command_completed', command=args.command, duration_seconds=duration)

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
