"""
Settings for the rediskv facade.

Two layers live here:

- ``Settings``: process-wide application knobs (log level, log dir, environment),
  read once from the environment like any other service setting.
- ``RedisConfig``: connection parameters for a single client. These are resolved
  per field (explicit value > environment variable > default) by
  ``load_redis_config`` and then handed to ``RedisClient.connect`` by value.
"""

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ConfigurationError

# Load .env file for local development - look in current working directory
load_dotenv(".env")

DEFAULT_HOST = "localhost"
DEFAULT_PORT = "6379"
DEFAULT_PASSWORD = ""
DEFAULT_DB = 0
DEFAULT_MAX_CONNECTIONS = 64
DEFAULT_CONNECTION_TIMEOUT = 30.0


def _get_version_from_pyproject() -> str:
    """
    Read version from pyproject.toml file.

    Returns:
        Version string from pyproject.toml, or fallback version
    """
    current_path = Path(__file__)
    for parent in [current_path.parent, *current_path.parents]:
        pyproject_path = parent / "pyproject.toml"
        if pyproject_path.exists():
            try:
                with open(pyproject_path, "rb") as f:
                    pyproject_data = tomllib.load(f)
                    version = pyproject_data.get("project", {}).get("version")
                    if version:
                        return version
            except (OSError, tomllib.TOMLDecodeError):
                continue

    return "0.1.0"


class RedisConfig(BaseModel):
    """Immutable connection parameters for one Redis client."""

    model_config = ConfigDict(frozen=True)

    host: str = DEFAULT_HOST
    port: str = DEFAULT_PORT
    password: str = Field(default=DEFAULT_PASSWORD, repr=False)
    db: int = Field(default=DEFAULT_DB, ge=0)
    max_connections: int = Field(default=DEFAULT_MAX_CONNECTIONS, gt=0)
    connection_timeout: float = Field(default=DEFAULT_CONNECTION_TIMEOUT, gt=0)

    def __init__(self, **data):
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid Redis configuration: {e}") from e

    @classmethod
    def model_validate(cls, obj, *args, **kwargs):
        try:
            return super().model_validate(obj, *args, **kwargs)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid Redis configuration: {e}") from e

    @field_validator("port", mode="before")
    @classmethod
    def check_port(cls, value):
        if isinstance(value, bool):
            raise ValueError(f"port must be an integer, got {value!r}")
        try:
            parsed = int(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"port must be an integer, got {value!r}") from e
        if not 1 <= parsed <= 65535:
            raise ValueError(f"port must be in 1..65535, got {parsed}")
        return str(parsed)

    @property
    def address(self) -> str:
        """Connection address in ``host:port`` form."""
        return f"{self.host}:{self.port}"


def _pick(explicit, env: Mapping[str, str], name: str, default):
    if explicit is not None:
        return explicit
    value = env.get(name)
    if value is None or value == "":
        return default
    return value


def _parse_int(value, name: str, *, minimum: int) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    try:
        parsed = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from e
    if parsed < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {parsed}")
    return parsed


def _parse_float(value, name: str) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from e
    if parsed <= 0:
        raise ConfigurationError(f"{name} must be positive, got {parsed}")
    return parsed


def load_redis_config(
    host: str | None = None,
    port: str | int | None = None,
    password: str | None = None,
    db: int | str | None = None,
    *,
    max_connections: int | None = None,
    connection_timeout: float | None = None,
    environ: Mapping[str, str] | None = None,
) -> RedisConfig:
    """
    Resolve connection parameters field by field.

    Each field takes the explicit argument when given, else the matching
    ``REDIS_*`` environment variable when set and non-empty, else the default.

    Args:
        host: Overrides ``REDIS_HOST`` (default "localhost")
        port: Overrides ``REDIS_PORT`` (default "6379")
        password: Overrides ``REDIS_PASSWORD`` (default empty)
        db: Overrides ``REDIS_DB`` (default 0)
        max_connections: Overrides ``REDIS_MAX_CONNECTIONS`` (default 64)
        connection_timeout: Overrides ``REDIS_CONNECTION_TIMEOUT`` in seconds (default 30)
        environ: Mapping to read variables from (defaults to ``os.environ``)

    Raises:
        ConfigurationError: If port, db or a pool knob is not a valid number.
    """
    env = os.environ if environ is None else environ

    raw_port = _pick(port, env, "REDIS_PORT", DEFAULT_PORT)
    parsed_port = _parse_int(raw_port, "REDIS_PORT", minimum=1)
    if parsed_port > 65535:
        raise ConfigurationError(f"REDIS_PORT must be <= 65535, got {parsed_port}")

    return RedisConfig(
        host=str(_pick(host, env, "REDIS_HOST", DEFAULT_HOST)),
        port=str(parsed_port),
        password=str(_pick(password, env, "REDIS_PASSWORD", DEFAULT_PASSWORD)),
        db=_parse_int(_pick(db, env, "REDIS_DB", DEFAULT_DB), "REDIS_DB", minimum=0),
        max_connections=_parse_int(
            _pick(max_connections, env, "REDIS_MAX_CONNECTIONS", DEFAULT_MAX_CONNECTIONS),
            "REDIS_MAX_CONNECTIONS",
            minimum=1,
        ),
        connection_timeout=_parse_float(
            _pick(
                connection_timeout,
                env,
                "REDIS_CONNECTION_TIMEOUT",
                DEFAULT_CONNECTION_TIMEOUT,
            ),
            "REDIS_CONNECTION_TIMEOUT",
        ),
    )


class Settings:
    """Application settings with environment-based configuration."""

    def __init__(self):
        self.version: str = _get_version_from_pyproject()

        # ================================================================
        # Logging & Environment
        # ================================================================
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")
        self.log_dir: str = os.getenv("LOG_DIR", "./logs")
        self.environment: str = os.getenv("ENVIRONMENT", "DEV")

        self._validate_settings()

    def _validate_settings(self):
        """Validate settings values."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR"]
        if self.log_level.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        self.log_level = self.log_level.upper()

        valid_environments = ["DEV", "PROD"]
        if self.environment.upper() not in valid_environments:
            self.environment = "DEV"  # Default fallback
        self.environment = self.environment.upper()

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "DEV"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "PROD"


# Global settings instance
settings = Settings()
