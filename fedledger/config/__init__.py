from .logging import configure_logging, get_logger, setup_logging
from .settings import Settings, get_settings, load_yaml_settings

__all__ = [
    "Settings",
    "get_settings",
    "load_yaml_settings",
    "configure_logging",
    "get_logger",
    "setup_logging",
]
