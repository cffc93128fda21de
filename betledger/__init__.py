"""
BetLedger - personal betting ledger with derived bankroll and performance stats.
"""
__version__ = "0.1.0"
