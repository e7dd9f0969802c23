"""
Logging configuration for the PIX ledger service.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", db_echo: bool = False) -> None:
    """
    Configure root + service loggers.

    Safe to call more than once: the console handler is replaced, not stacked.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        if getattr(handler, "_pixledger", False):
            root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    console_handler._pixledger = True
    root_logger.addHandler(console_handler)

    logging.getLogger("pixledger").setLevel(log_level)

    # SQL echo is controlled by settings.db_echo; keep the engine quiet otherwise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if db_echo else logging.WARNING)
