"""Console logging setup for the service process."""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
HANDLER_NAME = "wallet_auth.console"


def configure_logging(level: str = "INFO") -> None:
    """Attach a stdout handler to the ``wallet_auth`` logger tree.

    Calling it again only updates the level.
    """
    root = logging.getLogger("wallet_auth")
    root.setLevel(level.upper())
    if any(handler.name == HANDLER_NAME for handler in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)


def short_address(address: str) -> str:
    """Abbreviate an address for log lines."""
    if len(address) <= 12:
        return address
    return f"{address[:6]}…{address[-4:]}"
