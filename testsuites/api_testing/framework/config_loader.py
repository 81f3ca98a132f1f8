"""
================================================================================
Configuration Loader
================================================================================

YAML-based configuration management with environment variable override support.

Features:
    - YAML configuration file (config/config.yaml, or CONFIG_PATH)
    - Environment variable override (API_URL overrides api.url)
    - Dot notation path access with default values
    - Explicit validation of required secrets
    - Immutable Settings snapshot injected into harness components

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

import yaml
from loguru import logger


# Default configuration file path (repo root / config / config.yaml)
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent.parent / "config" / "config.yaml"

# Keys that must be explicitly configured before tokens can be trusted
REQUIRED_KEYS = ("jwt.secret",)

DEFAULT_API_URL = "http://localhost:3000"
DEFAULT_API_VERSION = "v1"
DEFAULT_JWT_SECRET = "default_jwt_secret"
DEFAULT_JWT_EXPIRATION = "1h"
DEFAULT_TEST_USER_EMAIL = "test@example.com"
DEFAULT_TEST_USER_PASSWORD = "password123"

_DURATION_UNITS = {
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
    "w": 604800,
}
_DURATION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(s|m|h|d|w)?\s*$", re.IGNORECASE)


class ConfigurationError(Exception):
    """Raised when configuration loading, access or validation fails."""
    pass


def env_name(key: str) -> str:
    """Map a dot-notation key to its environment variable (api.url -> API_URL)."""
    return key.upper().replace(".", "_")


def parse_duration(value: Union[str, int, float]) -> int:
    """
    Convert an expiration value to whole seconds.

    Accepts plain numbers (seconds) and suffixed strings:
    "45s", "30m", "1h", "2d", "1w".

    Raises:
        ConfigurationError: If the value cannot be parsed or is not positive
    """
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid duration: {value!r}")

    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        match = _DURATION_PATTERN.match(str(value))
        if not match:
            raise ConfigurationError(f"Invalid duration: {value!r}")
        amount, unit = match.groups()
        seconds = float(amount) * _DURATION_UNITS[(unit or "s").lower()]

    if seconds <= 0:
        raise ConfigurationError(f"Duration must be positive: {value!r}")
    return max(int(seconds), 1)


class ConfigLoader:
    """
    Configuration loader with YAML and environment variable support.

    Configuration hierarchy (highest to lowest priority):
        1. Environment variables (API_URL)
        2. YAML configuration file
        3. Default values

    Usage:
        >>> config = ConfigLoader()
        >>> config.get("api.url", "http://localhost:3000")
        'https://api.example.com'  # From YAML or env var

        >>> config.validate()  # raises if JWT_SECRET is missing

    Environment Variable Mapping:
        - api.url -> API_URL
        - api.version -> API_VERSION
        - jwt.secret -> JWT_SECRET
        - jwt.expiration -> JWT_EXPIRATION
        - test_user.email -> TEST_USER_EMAIL
        - test_user.password -> TEST_USER_PASSWORD
    """

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Initialize configuration loader.

        Args:
            config_path: Path to YAML configuration file.
                        Falls back to CONFIG_PATH, then DEFAULT_CONFIG_PATH.
        """
        if config_path is None:
            env_path = os.environ.get("CONFIG_PATH")
            config_path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH

        self._config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    @property
    def config_path(self) -> Path:
        return self._config_path

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        if not self._config_path.exists():
            logger.warning(
                f"Configuration file not found: {self._config_path}. "
                f"Using defaults and environment variables only."
            )
            self._config = {}
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                self._config = yaml.safe_load(f) or {}
            logger.debug(f"Loaded configuration from: {self._config_path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {e}"
            ) from e

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        First checks environment variables, then YAML config, then default.

        Args:
            key: Dot-notation path (e.g., "api.url")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        env_value = os.environ.get(env_name(key))
        if env_value:
            return self._convert_type(env_value, default)

        # Empty values count as unset
        value = self._lookup(key)
        return default if value is None or value == "" else value

    def has(self, key: str) -> bool:
        """Return True when the key is set to a non-empty value in env or YAML."""
        env_value = os.environ.get(env_name(key))
        if env_value:
            return True
        value = self._lookup(key)
        return value is not None and value != ""

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get entire configuration section.

        Args:
            section: Section name (e.g., "api", "jwt")

        Returns:
            Section dictionary or empty dict if not found
        """
        return self._config.get(section, {})

    def validate(self, required: Iterable[str] = REQUIRED_KEYS) -> None:
        """
        Ensure every required key is configured.

        Never called implicitly on load; call it before the first token is
        minted when secrets must come from the environment.

        Raises:
            ConfigurationError: Listing every missing environment variable
        """
        missing = [env_name(key) for key in required if not self.has(key)]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}\n"
                "Please check your configuration file or set these variables "
                "in your environment."
            )

    def reload(self) -> None:
        """
        Reload configuration from file.

        Useful when configuration file has been updated during runtime.
        """
        self._load_config()
        logger.info(f"Configuration reloaded from: {self._config_path}")

    def _lookup(self, key: str) -> Any:
        value: Any = self._config
        for part in key.split("."):
            if isinstance(value, dict):
                value = value.get(part)
            else:
                return None
            if value is None:
                return None
        return value

    def _convert_type(self, value: str, reference: Any) -> Any:
        """
        Convert string value to match reference type.

        Used for environment variables which are always strings.
        """
        if reference is None:
            return value

        if isinstance(reference, bool):
            return value.lower() in ("true", "1", "yes", "on")
        if isinstance(reference, int):
            try:
                return int(value)
            except ValueError:
                return value
        if isinstance(reference, float):
            try:
                return float(value)
            except ValueError:
                return value

        return value


@dataclass(frozen=True)
class Settings:
    """
    Immutable process-wide configuration snapshot.

    Built once (usually by a session fixture) and passed to every
    component that needs it.
    """

    api_url: str = DEFAULT_API_URL
    api_version: str = DEFAULT_API_VERSION
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_expiration: str = DEFAULT_JWT_EXPIRATION
    test_user_email: str = DEFAULT_TEST_USER_EMAIL
    test_user_password: str = DEFAULT_TEST_USER_PASSWORD

    def __post_init__(self) -> None:
        if not self.jwt_secret:
            raise ConfigurationError("JWT secret must not be empty")
        # Expiration must parse at construction
        parse_duration(self.jwt_expiration)

    @property
    def jwt_expiration_seconds(self) -> int:
        return parse_duration(self.jwt_expiration)

    @classmethod
    def from_loader(cls, loader: ConfigLoader) -> "Settings":
        return cls(
            api_url=str(loader.get("api.url", DEFAULT_API_URL)).rstrip("/"),
            api_version=str(loader.get("api.version", DEFAULT_API_VERSION)),
            jwt_secret=str(loader.get("jwt.secret", DEFAULT_JWT_SECRET)),
            jwt_expiration=str(loader.get("jwt.expiration", DEFAULT_JWT_EXPIRATION)),
            test_user_email=str(loader.get("test_user.email", DEFAULT_TEST_USER_EMAIL)),
            test_user_password=str(
                loader.get("test_user.password", DEFAULT_TEST_USER_PASSWORD)
            ),
        )


def load_settings(
    config_path: Optional[Path] = None,
    validate: bool = False,
) -> Settings:
    """
    Load configuration and build Settings in one step.

    Args:
        config_path: Optional YAML file path
        validate: Run ConfigLoader.validate() before building

    Raises:
        ConfigurationError: On invalid YAML, failed validation or bad values
    """
    loader = ConfigLoader(config_path=config_path)
    if validate:
        loader.validate()
    return Settings.from_loader(loader)


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "Settings",
    "load_settings",
    "parse_duration",
    "env_name",
    "REQUIRED_KEYS",
]
