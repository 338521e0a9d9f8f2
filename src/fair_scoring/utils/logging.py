"""Log configuration for the fair_scoring service.

Modules log through ``get_logger(__name__)``, which places every logger
under the ``fair_scoring`` tree. ``setup_logging`` attaches one handler to
that tree, leaving the root logger to uvicorn or whatever runs the app.
"""

import logging
import sys

PACKAGE_LOGGER = "fair_scoring"
HANDLER_NAME = "fair_scoring.console"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Libraries that log every statement or request at INFO
CHATTY_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "httpx")


def setup_logging(level: int | str = "INFO", show_sql: bool = False) -> logging.Logger:
    """Attach the console handler to the package logger and set its level.

    Calling it again only updates the level, so the app's lifespan can run
    more than once (as it does under tests) without duplicating output.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)

    if not any(h.get_name() == HANDLER_NAME for h in package_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        package_logger.addHandler(handler)

    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO if show_sql else logging.WARNING)

    return package_logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
