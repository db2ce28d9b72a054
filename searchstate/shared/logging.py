"""Logging setup: one stdout handler, module loggers named after their modules."""

import logging
import sys

from searchstate.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Third-party loggers that are too chatty at DEBUG.
_QUIET_LOGGERS = ("sqlalchemy.engine", "httpx", "httpcore")


def setup_logging() -> None:
    """Configure the root logger from settings.

    debug=True forces DEBUG, which shows cache HIT/MISS/SET lines and the
    parameters backfilled for each key; otherwise settings.log_level applies.
    """
    settings = get_settings()
    level = logging.DEBUG if settings.debug else logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stdout)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
