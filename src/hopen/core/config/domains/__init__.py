"""Domain-specific configuration accessors."""

from .logging import LoggingConfig
from .server import ServerConfig

__all__ = ["LoggingConfig", "ServerConfig"]
