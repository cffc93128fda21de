"""
Strongly typed configuration using pydantic-settings.

All settings are validated at startup and loaded from:
1. Default values defined here
2. .env file (if present)
3. Environment variables (highest priority)

Environment variable naming:
- LedgerSettings: LEDGER_INITIAL_BANKROLL, LEDGER_ODDS_FORMAT, etc.
- ObservabilitySettings: ENVIRONMENT, LOG_LEVEL (no prefix)
- Settings: DATA_DIR, LEDGER_FILE
"""
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


class LedgerSettings(BaseSettings):
    """Bankroll and odds defaults."""
    
    model_config = SettingsConfigDict(env_prefix="LEDGER_")
    
    initial_bankroll: float = Field(default=1000.0, gt=0.0, description="Seed bankroll for a new ledger")
    
    # Odds entry/display
    odds_format: str = Field(default="american", pattern="^(american|decimal|fractional)$")
    fractional_max_denominator: int = Field(
        default=100, ge=1, le=10_000,
        description="Largest denominator used when reducing decimal odds to a fraction"
    )
    
    # Performance windows
    week_start: str = Field(default="sunday", pattern="^(sunday|monday)$")
    
    @field_validator("odds_format", "week_start", mode="before")
    @classmethod
    def lowercase(cls, v):
        return v.lower() if isinstance(v, str) else v


class ObservabilitySettings(BaseSettings):
    """Logging and metrics settings."""
    
    model_config = SettingsConfigDict(env_prefix="")  # Direct: ENVIRONMENT, LOG_LEVEL
    
    environment: str = Field(default="development", pattern="^(development|staging|production)$")
    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    log_format: str = Field(default="console", pattern="^(console|json)$")
    enable_metrics: bool = Field(default=True)


class Settings(BaseSettings):
    """
    Root settings aggregating all subsections.
    
    Usage:
        from betledger.config import settings
        
        settings.ledger.initial_bankroll
        settings.ledger.odds_format
        settings.observability.log_level
        settings.ledger_path
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)
    
    # Paths
    data_dir: Path = Field(default=Path("data"))
    ledger_file: str = Field(default="ledger.json")
    
    @property
    def ledger_path(self) -> Path:
        """Location of the ledger snapshot."""
        return self.data_dir / self.ledger_file
