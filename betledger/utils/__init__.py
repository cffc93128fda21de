# Utils module
from .logging import setup_logging
from .observability import Logger, LedgerMetrics, initialize_observability, CORRELATION_ID

__all__ = [
    "setup_logging",
    "Logger",
    "LedgerMetrics",
    "initialize_observability",
    "CORRELATION_ID",
]
