"""Configuration manager for settings stored as JSON."""

import json
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import (
    ConfigurationError,
    FileSystemError,
    ImapFetchError,
    InvalidConfigError,
    MissingConfigError,
)
from .logging import get_logger, log_call
from .paths import CONFIG_PATH

logger = get_logger(__name__)

IMAP_PORT = 143
IMAPS_PORT = 993


class AccountConfig(BaseModel):
    """Pydantic model for account configuration."""

    server: str = ""
    port: Optional[int] = None
    use_tls: bool = False
    username: str = ""
    password: str = ""
    folder: str = "INBOX"
    message_num: int = 1
    network_timeout: Optional[float] = 30.0  # in seconds, 0 or None blocks forever

    @field_validator("message_num")
    @classmethod
    def _positive_message_num(cls, value: int) -> int:
        if value < 1:
            raise ValueError("message_num must be a positive sequence number")
        return value

    @property
    def resolved_port(self) -> int:
        """Explicit port, else the IMAPS or IMAP default."""
        if self.port:
            return self.port
        return IMAPS_PORT if self.use_tls else IMAP_PORT

    @property
    def resolved_timeout(self) -> Optional[float]:
        return self.network_timeout or None


class LoggingConfig(BaseModel):
    """Pydantic model for logging settings."""

    log_level: str = "WARNING"  # console level, -v forces DEBUG
    log_file: Optional[str] = None
    max_file_size: int = 5_242_880  # 5 MB
    backup_count: int = 5


class LimitsConfig(BaseModel):
    """Pydantic model for buffer limits."""

    peek_size: int = Field(default=1024, gt=0)
    max_literal_size: int = Field(default=64 * 1024 * 1024, gt=0)


class AppConfig(BaseModel):
    """Pydantic model for overall application configuration."""

    version: str = "0.1.0"
    account: AccountConfig = Field(default_factory=AccountConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)


class ConfigManager:
    """Loads application configuration and applies runtime overrides."""

    def __init__(self, config_path: Optional[Path] = None):
        self.path = Path(config_path) if config_path else CONFIG_PATH
        self.config = self._load_config()
        logger.debug(f"Configuration loaded from {self.path}")

    def _load_config(self) -> AppConfig:
        """Load configuration from file, or defaults if not present."""

        if not self.path.exists():
            logger.debug("No config file found, using default configuration.")
            return AppConfig()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            config = AppConfig(**data)
            logger.debug("Configuration successfully loaded and validated.")
            return config

        except OSError as e:
            raise FileSystemError(
                f"Configuration file could not be read: {self.path}"
            ) from e
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse config file: {e}")
            raise InvalidConfigError(
                f"Configuration file is not valid JSON: {str(e)}"
            ) from e
        except ValidationError as e:
            logger.error(f"Failed to validate config file: {e}")
            raise InvalidConfigError(
                f"Configuration data does not match expected schema: {str(e)}"
            ) from e
        except TypeError as e:
            raise InvalidConfigError(
                f"Configuration root must be a JSON object: {self.path}"
            ) from e

    @log_call
    def set_config(self, key_path: str, value: Any):
        """Set a configuration value using dot-separated key path."""

        try:
            keys = key_path.split(".")
            section_name = keys[0]

            if len(keys) != 2 or not hasattr(self.config, section_name):
                raise MissingConfigError(
                    f"Configuration path '{key_path}' is invalid"
                )

            section = getattr(self.config, section_name)
            if keys[1] not in type(section).model_fields:
                raise MissingConfigError(
                    f"Configuration key '{keys[1]}' does not exist in path '{key_path}'"
                )

            data = section.model_dump()
            data[keys[1]] = value
            setattr(self.config, section_name, type(section)(**data))

            logger.debug(f"Config key '{key_path}' updated.")

        except ImapFetchError:
            raise
        except ValidationError as e:
            raise InvalidConfigError(
                f"Invalid value for configuration key '{key_path}': {str(e)}"
            ) from e
        except Exception as e:
            raise ConfigurationError(
                f"Failed to set configuration key '{key_path}': {str(e)}"
            ) from e
