"""
Configuration module with strongly typed settings.

Usage:
    from betledger.config import settings
    
    print(settings.ledger.initial_bankroll)
    print(settings.ledger.odds_format)
"""
from .settings import (
    Settings,
    LedgerSettings,
    ObservabilitySettings,
)

# Singleton instance - validates on import
settings = Settings()

__all__ = [
    "settings",
    "Settings",
    "LedgerSettings",
    "ObservabilitySettings",
]
