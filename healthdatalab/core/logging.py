from __future__ import annotations

import logging


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure process-wide logging defaults for the API."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
