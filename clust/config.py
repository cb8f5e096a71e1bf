"""
Client configuration management.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigError
from .messages.types import ApiVersion, Beta

DEFAULT_BASE_URL = "https://api.anthropic.com"

# 环境变量名
ENV_API_KEY = "ANTHROPIC_API_KEY"
ENV_BASE_URL = "ANTHROPIC_BASE_URL"
ENV_VERSION = "ANTHROPIC_VERSION"
ENV_BETA = "ANTHROPIC_BETA"


class ClientConfig(BaseModel):
    """Configuration of a Client / AsyncClient."""

    model_config = ConfigDict(extra="forbid")

    api_key: str = Field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    version: ApiVersion = ApiVersion.V2023_06_01
    beta: Optional[Beta] = None
    timeout: float = Field(default=60.0, gt=0)
    max_retries: int = Field(default=2, ge=0)
    headers: Dict[str, str] = Field(default_factory=dict)

    @field_validator('api_key')
    @classmethod
    def api_key_non_empty(cls, v):
        if not v:
            raise ValueError("API key cannot be empty")
        return v

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v):
        return (v or DEFAULT_BASE_URL).rstrip('/')

    @property
    def messages_url(self) -> str:
        return f"{self.base_url}/v1/messages"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **overrides: Any) -> "ClientConfig":
        """
        Load configuration from environment variables.

        Args:
            env_file: Optional .env file loaded first (existing variables win)
            **overrides: Values that take precedence over the environment

        Raises:
            ConfigError: If ANTHROPIC_API_KEY is missing or a value is invalid
        """
        if env_file is not None:
            load_dotenv(env_file)

        data: Dict[str, Any] = {}
        for key, env_name in (
            ("api_key", ENV_API_KEY),
            ("base_url", ENV_BASE_URL),
            ("version", ENV_VERSION),
            ("beta", ENV_BETA),
        ):
            value = os.getenv(env_name)
            if value:
                data[key] = value
        data.update(overrides)

        if not data.get("api_key"):
            raise ConfigError(f"Environment variable {ENV_API_KEY} is not set")
        return cls._build(data)

    @classmethod
    def from_yaml(cls, config_path: str) -> "ClientConfig":
        """
        Load configuration from YAML file.

        String values may reference environment variables with ${VAR_NAME}:

            api_key: ${ANTHROPIC_API_KEY}
            timeout: 30
            headers:
              x-trace: demo

        Raises:
            FileNotFoundError: If config file not found
            ConfigError: If config format is invalid
        """
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)

        if not data:
            raise ConfigError(f"Empty configuration file: {config_path}")
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration must be a mapping: {config_path}")

        return cls._build(_resolve_env(data))

    @classmethod
    def _build(cls, data: Dict[str, Any]) -> "ClientConfig":
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid client configuration: {e}") from e


def _resolve_env(obj: Any) -> Any:
    """
    递归展开 ${VAR_NAME} 形式的环境变量

    A value that is exactly ${VAR} becomes the variable's value (None if unset).
    """
    if isinstance(obj, str):
        if obj.startswith("${") and obj.endswith("}"):
            var_name = obj[2:-1].strip()
            return os.getenv(var_name)
        return obj
    elif isinstance(obj, dict):
        return {k: _resolve_env(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_resolve_env(item) for item in obj]
    return obj
