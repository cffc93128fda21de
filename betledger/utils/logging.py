"""
stdlib logging for the ledger library and CLI.

Library modules log through logging.getLogger(__name__) under the
"betledger" namespace; setup_logging attaches the handlers once per run.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

from betledger.config import ObservabilitySettings

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
JSON_FIELDS = "%(asctime)s %(name)s %(levelname)s %(message)s"


def _formatter(use_json: bool) -> logging.Formatter:
    if use_json:
        return JsonFormatter(fmt=JSON_FIELDS, datefmt="%Y-%m-%dT%H:%M:%S")
    return logging.Formatter(fmt=CONSOLE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def setup_logging(
    name: str = "betledger",
    level: Optional[str] = None,
    log_file: Optional[Path] = None
) -> logging.Logger:
    """
    Attach stderr (and optionally file) handlers to the named logger.

    Output is JSON when ENVIRONMENT is production or LOG_FORMAT is json,
    plain text otherwise. Calling it again replaces the handlers.

    Args:
        name: Logger name
        level: DEBUG, INFO, WARNING, ERROR. Defaults to LOG_LEVEL
        log_file: Also write to this file (parent directories are created)

    Returns:
        The configured logger
    """
    config = ObservabilitySettings()
    level = (level or config.log_level).upper()
    formatter = _formatter(config.environment == "production" or config.log_format == "json")

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level))
    logger.handlers = []

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
