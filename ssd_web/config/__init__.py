from .ini_config import MAX_WORKERS, AppSettings, IniConfig
from .logging_config import configure_logging

__all__ = [
    "MAX_WORKERS",
    "AppSettings",
    "IniConfig",
    "configure_logging",
]
