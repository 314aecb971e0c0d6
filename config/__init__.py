# Path: config/__init__.py
# Purpose: Package initializer for configuration module.
# Layer: config.
# Details: Exposes settings models and the logging bootstrap for application-wide configuration.

from .log import configure_logging
from .settings import AppSettings, RemoteSettings, StorageSettings

__all__ = ["AppSettings", "RemoteSettings", "StorageSettings", "configure_logging"]
