"""Configuration loading and management for remfs."""

from remfs.kernel.config.loader import ConfigLoader, get_default_config, load_config
from remfs.kernel.config.models import ClientConfig, LoggingConfig, RemFSConfig

__all__ = [
    "ClientConfig",
    "ConfigLoader",
    "LoggingConfig",
    "RemFSConfig",
    "get_default_config",
    "load_config",
]
