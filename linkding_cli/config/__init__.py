"""
Configuration loading for the linkding CLI.
"""

from .configuration import Configuration
from .pydantic_config import (
    ConfigurationManager,
    LinkdingConfig,
    NetworkConfig,
    default_config_path,
    format_config_error,
    save_config,
)

__all__ = [
    "Configuration",
    "ConfigurationManager",
    "LinkdingConfig",
    "NetworkConfig",
    "default_config_path",
    "format_config_error",
    "save_config",
]
