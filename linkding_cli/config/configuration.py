"""
Configuration facade for the linkding CLI.

Wraps the pydantic ConfigurationManager with the small set of accessors the
commands need.
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .pydantic_config import ConfigurationManager, LinkdingConfig
from ..utils.secure_logging import redact_token


class Configuration:
    """
    Loaded and validated CLI configuration.

    Example:
        >>> config = Configuration()
        >>> print(config.url, config.redacted_token())
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize configuration manager.

        Args:
            config_path: Optional path to configuration file (TOML/JSON)
            environ: Environment mapping (defaults to os.environ)

        Raises:
            ConfigurationError: If no usable configuration is found
        """
        self._manager = ConfigurationManager(config_path, environ=environ)
        self._config = self._manager.config

    @property
    def config(self) -> LinkdingConfig:
        """Get the underlying Pydantic configuration."""
        return self._config

    @property
    def url(self) -> str:
        return self._config.url

    @property
    def token(self) -> str:
        return self._config.token.get_secret_value()

    @property
    def timeout(self) -> int:
        return self._config.network.timeout

    @property
    def max_retries(self) -> int:
        return self._config.network.max_retries

    @property
    def page_size(self) -> int:
        return self._config.network.page_size

    @property
    def source_path(self) -> Optional[Path]:
        return self._manager.source_path

    def redacted_token(self) -> str:
        """Token in a form safe to print."""
        return redact_token(self.token)

    def update_from_args(self, args: Dict[str, Any]) -> None:
        """
        Update configuration from command-line arguments.

        Args:
            args: Dictionary of validated arguments
        """
        self._manager.update_from_cli_args(args)
        self._config = self._manager.config

    def to_display_dict(self) -> Dict[str, Any]:
        """Settings with the token redacted."""
        return {
            "url": self.url,
            "token": self.redacted_token(),
            "timeout": self.timeout,
            "max_retries": self.max_retries,
            "page_size": self.page_size,
            "config_file": str(self.source_path) if self.source_path else None,
        }
