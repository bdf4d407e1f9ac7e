"""
Pydantic-based configuration for the linkding CLI.

Settings come from a TOML (or JSON) file under ``~/.config/ld`` and from
the ``LINKDING_URL`` / ``LINKDING_TOKEN`` environment variables, which take
precedence over the file.
"""

import json
import os
import stat
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import toml
from pydantic import (
    BaseModel,
    Field,
    SecretStr,
    ValidationError,
    field_validator,
)

from ..utils.error_handler import ConfigurationError

ENV_URL = "LINKDING_URL"
ENV_TOKEN = "LINKDING_TOKEN"

CONFIG_DIR_MODE = 0o700
CONFIG_FILE_MODE = 0o600

PLACEHOLDER_TOKENS = {"your-api-token-here", "changeme", "token"}

NO_CONFIG_MESSAGE = "No configuration found. Run 'ld config init' to set up"


def default_config_dir() -> Path:
    """Directory holding the user configuration."""
    return Path.home() / ".config" / "ld"


def default_config_path() -> Path:
    """Path used when saving a new configuration."""
    return default_config_dir() / "config.toml"


class NetworkConfig(BaseModel):
    """HTTP and pagination settings."""

    timeout: int = Field(
        default=30,
        ge=5,
        le=300,
        description="Request timeout in seconds",
        json_schema_extra={
            "error_msg": "Timeout must be between 5 and 300 seconds. "
            "Recommended: 30 seconds."
        },
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retry attempts for idempotent requests",
        json_schema_extra={
            "error_msg": "Max retries must be between 0 and 10."
        },
    )
    page_size: int = Field(
        default=100,
        ge=10,
        le=1000,
        description="Items requested per page when walking list endpoints",
        json_schema_extra={
            "error_msg": "Page size must be between 10 and 1000. "
            "Recommended: 100."
        },
    )


class LinkdingConfig(BaseModel):
    """Connection settings for one linkding server."""

    url: str = Field(
        description="Base URL of the linkding server",
        json_schema_extra={
            "error_msg": "URL must start with http:// or https://, "
            "e.g. https://links.example.com"
        },
    )
    token: SecretStr = Field(
        description="API token from the linkding settings page",
        json_schema_extra={
            "error_msg": "Token is shown under Settings > Integrations in "
            "linkding. Keep it out of version control."
        },
    )
    network: NetworkConfig = Field(default_factory=NetworkConfig)

    @field_validator("url", mode="before")
    @classmethod
    def validate_url(cls, v):
        """Normalize the server URL."""
        if v is None:
            raise ValueError("URL is required")
        url = str(v).strip().rstrip("/")
        if not url.lower().startswith(("http://", "https://")):
            raise ValueError(f"URL must start with http:// or https:// (got: {url})")
        return url

    @field_validator("token", mode="before")
    @classmethod
    def validate_token(cls, v):
        """Reject empty and placeholder tokens."""
        if v is None:
            raise ValueError("Token is required")
        token = v.get_secret_value() if isinstance(v, SecretStr) else str(v)
        token = token.strip()
        if not token:
            raise ValueError("Token is required")
        if token.lower() in PLACEHOLDER_TOKENS:
            raise ValueError(
                "Please replace the placeholder token with your actual API token"
            )
        return SecretStr(token)

    def to_file_dict(self) -> Dict[str, Any]:
        """Plain dictionary with the secret revealed, for writing to disk."""
        return {
            "url": self.url,
            "token": self.token.get_secret_value(),
            "network": self.network.model_dump(),
        }


class ConfigurationManager:
    """Manages loading and validation of configuration from multiple sources."""

    def __init__(
        self,
        config_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize configuration manager.

        Args:
            config_path: Optional path to configuration file (TOML or JSON)
            environ: Environment mapping (defaults to os.environ)
        """
        self._config: Optional[LinkdingConfig] = None
        self._source_path: Optional[Path] = None
        self._environ = os.environ if environ is None else environ
        self._load_configuration(Path(config_path) if config_path else None)

    def _get_default_config_paths(self) -> List[Path]:
        """Get list of default configuration file paths to try."""
        config_dir = default_config_dir()
        return [config_dir / "config.toml", config_dir / "config.json"]

    def _load_configuration(self, config_path: Optional[Path] = None) -> None:
        """Load configuration from file and environment."""
        config_data: Dict[str, Any] = {}

        if config_path:
            config_data = self._load_config_file(config_path)
            self._source_path = config_path
        else:
            for path in self._get_default_config_paths():
                if path.exists():
                    config_data = self._load_config_file(path)
                    self._source_path = path
                    break

        # Environment variables take precedence over the file
        self._apply_env_overrides(config_data)

        if not config_data.get("url") or not config_data.get("token"):
            raise ConfigurationError(NO_CONFIG_MESSAGE)

        try:
            self._config = LinkdingConfig(**config_data)
        except ValidationError as e:
            raise ConfigurationError(format_config_error(e))

    def _load_config_file(self, config_path: Path) -> Dict[str, Any]:
        """Load configuration from TOML or JSON file."""
        if not config_path.exists():
            raise ConfigurationError(
                format_config_error(
                    FileNotFoundError(2, "No such file", str(config_path))
                )
            )

        try:
            if config_path.suffix.lower() == ".json":
                with open(config_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            else:
                data = toml.load(config_path)
        except (OSError, ValueError, toml.TomlDecodeError) as e:
            raise ConfigurationError(
                f"Failed to load configuration from {config_path}: {e}"
            )

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Failed to load configuration from {config_path}: "
                f"expected a table of settings"
            )
        return data

    def _apply_env_overrides(self, config_data: Dict[str, Any]) -> None:
        """Override url and token from environment variables."""
        url = self._environ.get(ENV_URL)
        token = self._environ.get(ENV_TOKEN)

        if url:
            config_data["url"] = url
        if token:
            config_data["token"] = token

    def update_from_cli_args(self, args: Dict[str, Any]) -> None:
        """Update configuration from command-line arguments."""
        if not self._config:
            raise RuntimeError("Configuration not loaded")

        config_dict = self._config.to_file_dict()

        if args.get("url"):
            config_dict["url"] = args["url"]
        if args.get("timeout") is not None:
            config_dict["network"]["timeout"] = args["timeout"]
        if args.get("max_retries") is not None:
            config_dict["network"]["max_retries"] = args["max_retries"]

        try:
            self._config = LinkdingConfig(**config_dict)
        except ValidationError as e:
            raise ConfigurationError(format_config_error(e))

    @property
    def config(self) -> LinkdingConfig:
        """Get the current configuration."""
        if not self._config:
            raise RuntimeError("Configuration not loaded")
        return self._config

    @property
    def source_path(self) -> Optional[Path]:
        """File the configuration was read from, if any."""
        return self._source_path

    def get_token(self) -> str:
        """Get the API token, returning the actual secret value."""
        return self.config.token.get_secret_value()


def save_config(config: LinkdingConfig, path: Optional[Path] = None) -> Path:
    """
    Write a configuration file readable only by the current user.

    The directory is created with mode 0700 and the file with mode 0600.

    Args:
        config: Validated configuration
        path: Target file (defaults to ~/.config/ld/config.toml)

    Returns:
        Path of the written file
    """
    path = Path(path) if path else default_config_path()

    try:
        path.parent.mkdir(mode=CONFIG_DIR_MODE, parents=True, exist_ok=True)

        data = config.to_file_dict()
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, CONFIG_FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                json.dump(data, f, indent=2)
            else:
                toml.dump(data, f)
        os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)
    except OSError as e:
        raise ConfigurationError(f"Failed to save config: {e}")

    return path


class ConfigurationErrorFormatter:
    """Formats Pydantic validation errors into user-friendly messages."""

    @staticmethod
    def format_validation_error(error: ValidationError) -> str:
        """
        Convert Pydantic ValidationError into a user-friendly error message.

        Args:
            error: Pydantic ValidationError instance

        Returns:
            Formatted error message with helpful guidance
        """
        error_messages = []

        for error_detail in error.errors():
            location = ConfigurationErrorFormatter._format_error_location(
                error_detail["loc"]
            )
            formatted_msg = ConfigurationErrorFormatter._format_by_error_type(
                location, error_detail["type"], error_detail
            )
            error_messages.append(formatted_msg)

        header = "Configuration Validation Failed:\n"
        footer = (
            "\n\nTips:\n"
            "• Run 'ld config init' to write a fresh configuration\n"
            "• Or set LINKDING_URL and LINKDING_TOKEN in the environment"
        )
        return header + "\n".join(error_messages) + footer

    @staticmethod
    def _format_error_location(location: tuple) -> str:
        """Format the error location path."""
        if not location:
            return "Configuration"
        return " → ".join(str(part) for part in location)

    @staticmethod
    def _format_by_error_type(location: str, error_type: str, error_detail: dict) -> str:
        """Format error message based on Pydantic error type."""
        input_value = error_detail.get("input", "N/A")

        # Never echo the token back
        if location.endswith("token"):
            input_value = "***"

        if error_type == "missing":
            return f"✗ {location}: Required field is missing"

        if error_type in (
            "greater_than_equal",
            "less_than_equal",
            "greater_than",
            "less_than",
        ):
            ctx = error_detail.get("ctx", {})
            limit = next(iter(ctx.values()), "limit") if ctx else "limit"
            operator = {
                "greater_than_equal": "≥",
                "less_than_equal": "≤",
                "greater_than": ">",
                "less_than": "<",
            }[error_type]
            return f"✗ {location}: Value must be {operator} {limit} (got: {input_value})"

        msg = error_detail.get("msg", "Invalid configuration value")
        return f"✗ {location}: {msg} (got: {input_value})"


def format_config_error(error: Exception) -> str:
    """
    Format any configuration-related error into a user-friendly message.

    Args:
        error: Exception that occurred during configuration

    Returns:
        Formatted error message
    """
    if isinstance(error, ValidationError):
        return ConfigurationErrorFormatter.format_validation_error(error)

    if isinstance(error, FileNotFoundError):
        return (
            f"Configuration file not found: {error.filename}\n"
            f"Run 'ld config init' to create one, or pass --config with an "
            f"existing file"
        )

    return f"Configuration error: {error}"
