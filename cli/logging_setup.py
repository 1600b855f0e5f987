"""Logging setup for the CLI"""

import logging

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Third-party loggers that are too chatty at DEBUG
_QUIET_LOGGERS = ("httpcore", "asyncio", "aiohttp.access")


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Configure the root logger for a CLI run

    Args:
        verbose: Log at DEBUG (full request/response dumps) instead of INFO

    Returns:
        The configured root logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    # Clear existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(console_handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if verbose:
        root_logger.debug("Verbose logging enabled")
    return root_logger
