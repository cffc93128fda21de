# betledger/utils/observability.py
"""
Structured CLI events and ledger metrics.

Every CLI run configures structlog once and tags its events with a
correlation id. Library modules keep using stdlib logging.
"""
import contextvars
import logging
import sys
from typing import Optional, Tuple

import structlog
from prometheus_client import CollectorRegistry, Counter, Gauge

from betledger.config import ObservabilitySettings

# Set per CLI invocation
CORRELATION_ID = contextvars.ContextVar('correlation_id', default=None)


class ObservabilityConfig:
    """Resolved logging/metrics options for one run."""

    def __init__(self, source: Optional[ObservabilitySettings] = None):
        source = source or ObservabilitySettings()
        self.environment = source.environment
        self.log_level = source.log_level
        self.enable_metrics = source.enable_metrics
        self.log_format = 'json' if self.environment == 'production' else source.log_format


class LedgerMetrics:
    """
    Prometheus metrics for one ledger store.

    Each instance owns its registry, so several stores (or test cases)
    never clash on metric names.
    """

    def __init__(self, registry: CollectorRegistry = None):
        self.registry = registry or CollectorRegistry()

        self.mutations = Counter(
            'ledger_mutations_total',
            'Applied ledger mutations',
            labelnames=['operation'],  # add, edit, delete, settle, cash_out, reset, set_initial
            registry=self.registry,
        )
        self.not_found = Counter(
            'ledger_bet_not_found_total',
            'Mutations addressed to an unknown bet id',
            labelnames=['operation'],
            registry=self.registry,
        )

        self.current_bankroll = Gauge(
            'ledger_current_bankroll',
            'Current bankroll balance',
            registry=self.registry,
        )
        self.bets_total = Gauge(
            'ledger_bets',
            'Number of bets in the ledger',
            registry=self.registry,
        )

    def record_mutation(self, operation: str, current_bankroll: float, n_bets: int):
        self.mutations.labels(operation=operation).inc()
        self.current_bankroll.set(current_bankroll)
        self.bets_total.set(n_bets)

    def record_not_found(self, operation: str):
        self.not_found.labels(operation=operation).inc()


class StructlogConfig:
    """structlog setup for CLI events."""

    @staticmethod
    def configure(log_format: str = 'console', log_level: str = 'INFO'):
        """
        json    -> one JSON object per event
        console -> coloured key=value lines

        Events go to stderr; stdout is left to command output.
        """
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt='iso'),
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
        ]
        if log_format == 'json':
            processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
        else:
            processors.append(structlog.dev.ConsoleRenderer())

        structlog.configure(
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(
                logging.getLevelName(log_level.upper())
            ),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
            # Reconfigured on every run; a cached logger would keep a stale stream
            cache_logger_on_first_use=False,
        )


class Logger:
    """structlog logger that stamps events with the run's correlation id."""

    def __init__(self, module_name: str):
        self.logger = structlog.get_logger(module_name)
        self.module_name = module_name

    def _context(self, fields: dict) -> dict:
        return {'correlation_id': CORRELATION_ID.get(), 'module': self.module_name, **fields}

    def log_event(self, event: str, **kwargs):
        return self.logger.info(event, **self._context(kwargs))

    def log_error(self, event: str, exc_info=None, **kwargs):
        return self.logger.error(event, exc_info=exc_info, **self._context(kwargs))


def initialize_observability(
    environment: Optional[str] = None,
) -> Tuple[Optional[LedgerMetrics], ObservabilityConfig]:
    """
    Configure structlog and build the run's metrics.

    Args:
        environment: Overrides the configured environment (development,
            staging, production)

    Returns:
        (LedgerMetrics or None when metrics are disabled, resolved config)
    """
    config = ObservabilityConfig()
    if environment:
        config.environment = environment
        if environment == 'production':
            config.log_format = 'json'

    StructlogConfig.configure(log_format=config.log_format, log_level=config.log_level)
    metrics = LedgerMetrics() if config.enable_metrics else None

    structlog.get_logger(__name__).debug(
        'observability_ready',
        environment=config.environment,
        log_format=config.log_format,
        metrics_enabled=metrics is not None,
    )
    return metrics, config
