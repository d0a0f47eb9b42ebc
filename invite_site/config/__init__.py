from .logging import setup_logging
from .settings import Settings, get_settings, settings

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "setup_logging",
]
