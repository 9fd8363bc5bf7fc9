"""Logging configuration for the Firestore client."""

import logging
import sys

from pydantic import ValidationError

from firestore_rest.core.config import get_settings

PACKAGE_LOGGER = "firestore_rest"

# httpx/httpcore log every request at INFO, including URLs with document paths.
_TRANSPORT_LOGGERS = ("httpx", "httpcore")


def _debug_from_settings() -> bool:
    try:
        return get_settings().debug
    except ValidationError:
        # No project configured yet; logging must still come up.
        return False


def setup_logging(debug: bool | None = None) -> logging.Logger:
    """Configure logging for applications embedding the client.

    Level is DEBUG when debug is True, otherwise INFO. When debug is None it
    is read from FIRESTORE_DEBUG. Output goes to stdout. The transport
    loggers are held at WARNING unless debugging.

    Returns:
        The firestore_rest package logger.
    """
    if debug is None:
        debug = _debug_from_settings()
    log_level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(log_level)
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the firestore_rest namespace.

    Args:
        name: Module name; names outside the package are nested under it.
    """
    if name != PACKAGE_LOGGER and not name.startswith(f"{PACKAGE_LOGGER}."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
