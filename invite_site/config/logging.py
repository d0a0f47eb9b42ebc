import logging
import sys
from logging import StreamHandler

from invite_site.config.settings import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# The Sheets client logs every discovery fetch and HTTP retry at INFO
NOISY_LOGGERS = ("googleapiclient.discovery", "googleapiclient.discovery_cache", "google.auth")


def setup_logging() -> None:
    level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[StreamHandler(sys.stdout)],
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if settings.debug else logging.WARNING)
    logging.getLogger("invite_site.guests").setLevel(level)
