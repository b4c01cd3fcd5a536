"""
Logging setup. Importing this module configures the root logger once.
"""
import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = None) -> None:
    level_name = (level or os.environ.get("GENOSCRIPT_LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


configure_logging()
