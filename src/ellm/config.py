"""Configuration for the Anthropic API client.

Config holds the API key, endpoint, model and output token limit.
Load order for the API key: explicit argument, then the
ANTHROPIC_API_KEY environment variable, then the TOML config file at
``~/.config/ellm/config.toml`` (platform app dir on other systems).
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

import click
from pydantic import BaseModel, ConfigDict, ValidationError

from ellm.exceptions import (
    ApiKeyNotFoundError,
    ConfigFileError,
    InvalidApiKeyError,
)

logger = logging.getLogger(__name__)

API_KEY_ENV_VAR = "ANTHROPIC_API_KEY"
DEFAULT_BASE_URL = "https://api.anthropic.com/v1"
DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
DEFAULT_MAX_TOKENS = 4096

_KEY_PREFIX = "sk-ant-"
_MASK_VISIBLE_CHARS = 10


class Config(BaseModel):
    """Anthropic API client configuration.

    Instances are immutable; with_model() and with_max_tokens() return
    updated copies.

    Example::

        config = Config.load().with_model("claude-opus-4")
    """

    model_config = ConfigDict(frozen=True)

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS

    @classmethod
    def load(cls, api_key: str | None = None) -> Config:
        """Load configuration from the first source that has an API key.

        Args:
            api_key: Explicit key (e.g. from --api-key). Wins over everything.

        Raises:
            ApiKeyNotFoundError: If no source provides a key.
            ConfigFileError: If the config file exists but is unreadable
                or invalid.
        """
        if api_key is not None:
            return cls(api_key=api_key)

        env_key = os.environ.get(API_KEY_ENV_VAR)
        if env_key is not None:
            return cls(api_key=env_key)

        path = cls.config_path()
        if not path.exists():
            raise ApiKeyNotFoundError(str(path))
        return cls.from_file(path)

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from the environment only."""
        env_key = os.environ.get(API_KEY_ENV_VAR)
        if env_key is None:
            raise ApiKeyNotFoundError(str(cls.config_path()))
        return cls(api_key=env_key)

    @classmethod
    def from_file(cls, path: Path | None = None) -> Config:
        """Load configuration from a TOML file.

        Args:
            path: File to read. Defaults to config_path().

        Raises:
            ApiKeyNotFoundError: If the file does not exist or has no api_key.
            ConfigFileError: If the file cannot be read or parsed.
        """
        path = path or cls.config_path()
        if not path.exists():
            raise ApiKeyNotFoundError(str(path))
        try:
            data = tomllib.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigFileError(str(path), str(exc)) from exc
        except tomllib.TOMLDecodeError as exc:
            raise ConfigFileError(str(path), str(exc)) from exc

        if "api_key" not in data:
            raise ApiKeyNotFoundError(str(path))
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigFileError(str(path), str(exc)) from exc

    @staticmethod
    def config_path() -> Path:
        """Return the default config file path."""
        return Path(click.get_app_dir("ellm")) / "config.toml"

    def validate_key(self) -> None:
        """Validate the configuration before use.

        Only an empty key is an error. A key without the usual ``sk-ant-``
        prefix is logged as a warning.

        Raises:
            InvalidApiKeyError: If the API key is empty.
        """
        if not self.api_key:
            raise InvalidApiKeyError()
        if not self.api_key.startswith(_KEY_PREFIX):
            logger.warning(
                "API key does not start with '%s'. This may be invalid.", _KEY_PREFIX
            )

    def with_model(self, model: str) -> Config:
        return self.model_copy(update={"model": model})

    def with_max_tokens(self, max_tokens: int) -> Config:
        return self.model_copy(update={"max_tokens": max_tokens})

    def masked_key(self) -> str:
        """Return the key with everything after a short prefix hidden."""
        return f"{self.api_key[:_MASK_VISIBLE_CHARS]}***"
