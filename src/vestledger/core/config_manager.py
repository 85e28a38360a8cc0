"""
vestledger Configuration Manager

Centralized configuration management supporting:
- Environment-based configs (development/staging/production/testnet)
- Config file loading (YAML/JSON)
- Explicit override support
- Environment variable support (VESTLEDGER_*)
- Config validation

The seconds-per-day constant lives here rather than in code: test
deployments compress a vesting "day" to a few seconds, production uses
86400.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv

from .uint256 import UINT256_MAX
from .vesting_exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path(__file__).resolve().parent / "config"

ENV_PREFIX = "VESTLEDGER_"

SECONDS_PER_DAY = 86400
DECIMALS = 18
MAX_SUPPLY = 1_000_000_000 * 10**DECIMALS


class Environment(Enum):
    """Environment types"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTNET = "testnet"


@dataclass
class VestingConfig:
    """Vesting ledger settings"""
    seconds_per_day: int = SECONDS_PER_DAY
    max_supply: int = MAX_SUPPLY
    admin: str = ""

    def validate(self):
        """Validate vesting configuration"""
        if not isinstance(self.seconds_per_day, int) or self.seconds_per_day <= 0:
            raise ConfigurationError(
                f"Invalid seconds_per_day: {self.seconds_per_day}. Must be a positive integer"
            )
        if not isinstance(self.max_supply, int) or not (0 < self.max_supply <= UINT256_MAX):
            raise ConfigurationError(
                f"Invalid max_supply: {self.max_supply}. Must be between 1 and 2**256-1"
            )


@dataclass
class TokenConfig:
    """Token account settings"""
    name: str = "LifeCoin"
    symbol: str = "LIFC"
    decimals: int = DECIMALS
    max_supply: int = 0  # 0 = unlimited

    def validate(self):
        """Validate token configuration"""
        if not self.name:
            raise ConfigurationError("token name cannot be empty")
        if not self.symbol:
            raise ConfigurationError("token symbol cannot be empty")
        if not isinstance(self.decimals, int) or not (0 <= self.decimals <= 77):
            raise ConfigurationError(f"Invalid token decimals: {self.decimals}. Must be between 0-77")
        if not isinstance(self.max_supply, int) or not (0 <= self.max_supply <= UINT256_MAX):
            raise ConfigurationError(f"Invalid token max_supply: {self.max_supply}")


@dataclass
class LoggingConfig:
    """Logging configuration settings"""
    level: str = "INFO"
    log_file: str = ""
    enable_console: bool = True
    enable_file: bool = True
    environment: str = "development"
    max_log_size: int = 10485760  # 10MB
    backup_count: int = 7

    def validate(self):
        """Validate logging configuration"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.level.upper() not in valid_levels:
            raise ConfigurationError(f"Invalid log level: {self.level}. Must be one of {valid_levels}")
        if self.max_log_size < 1024:
            raise ConfigurationError(f"Invalid max_log_size: {self.max_log_size}. Must be >= 1024")


@dataclass
class MetricsConfig:
    """Prometheus instrumentation settings"""
    enabled: bool = True

    def validate(self):
        if not isinstance(self.enabled, bool):
            raise ConfigurationError(f"Invalid metrics.enabled: {self.enabled}. Must be a boolean")


class ConfigManager:
    """
    Configuration Manager for vestledger

    Handles loading, validation, and access to configuration settings
    from multiple sources with proper precedence:
    1. Explicit overrides (highest priority)
    2. Environment variables (VESTLEDGER_*)
    3. Environment-specific config files
    4. Default config file
    5. Built-in defaults (lowest priority)
    """

    def __init__(self,
                 environment: Optional[str] = None,
                 config_dir: Optional[str] = None,
                 overrides: Optional[Dict[str, Any]] = None):
        """
        Initialize Configuration Manager

        Args:
            environment: Environment name (development/staging/production/testnet)
            config_dir: Directory containing config files
            overrides: Dot-notation overrides, e.g. {"vesting.seconds_per_day": 5}
        """
        load_dotenv()

        self.environment = self._determine_environment(environment)
        self.config_dir = Path(config_dir).resolve() if config_dir else DEFAULT_CONFIG_DIR
        self.overrides = overrides or {}

        self.vesting: VestingConfig = None
        self.token: TokenConfig = None
        self.logging: LoggingConfig = None
        self.metrics: MetricsConfig = None

        self._raw_config: Dict[str, Any] = {}

        self._load_configuration()

    def _determine_environment(self, environment: Optional[str]) -> Environment:
        if environment:
            env_str = environment.lower()
        else:
            env_str = os.getenv(f"{ENV_PREFIX}ENVIRONMENT", "development").lower()

        env_mapping = {
            "dev": Environment.DEVELOPMENT,
            "development": Environment.DEVELOPMENT,
            "staging": Environment.STAGING,
            "stage": Environment.STAGING,
            "prod": Environment.PRODUCTION,
            "production": Environment.PRODUCTION,
            "testnet": Environment.TESTNET,
            "test": Environment.TESTNET,
        }

        return env_mapping.get(env_str, Environment.DEVELOPMENT)

    def _load_configuration(self):
        """Load configuration from all sources with proper precedence"""
        default_config = self._load_config_file("default")
        env_config = self._load_config_file(self.environment.value)
        merged_config = self._merge_configs(default_config, env_config)
        merged_config = self._apply_env_variables(merged_config)
        merged_config = self._apply_overrides(merged_config)

        self._raw_config = merged_config

        self._parse_configuration(merged_config)
        self._validate_configuration()
        logger.debug(
            "Configuration loaded for %s",
            self.environment.value,
            extra={"event": "config.loaded", "config_dir": str(self.config_dir)},
        )

    def _load_config_file(self, filename: str) -> Dict[str, Any]:
        """
        Load configuration from YAML or JSON file

        Args:
            filename: Config filename (without extension)

        Returns:
            Configuration dictionary, empty if no file exists
        """
        yaml_path = self.config_dir / f"{filename}.yaml"
        if yaml_path.exists():
            with open(yaml_path, "r") as f:
                try:
                    return yaml.safe_load(f) or {}
                except yaml.YAMLError as exc:
                    raise ConfigurationError(f"Malformed YAML in {yaml_path}: {exc}") from exc

        json_path = self.config_dir / f"{filename}.json"
        if json_path.exists():
            with open(json_path, "r") as f:
                try:
                    return json.load(f)
                except json.JSONDecodeError as exc:
                    raise ConfigurationError(f"Malformed JSON in {json_path}: {exc}") from exc

        return {}

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two configuration dictionaries (override wins)."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _apply_env_variables(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variable overrides (VESTLEDGER_*)

        Environment variables format:
        VESTLEDGER_SECTION_KEY=value

        Example:
        VESTLEDGER_VESTING_SECONDS_PER_DAY=5
        VESTLEDGER_LOGGING_LEVEL=DEBUG
        """
        result = {k: (dict(v) if isinstance(v, dict) else v) for k, v in config.items()}
        sections = ("vesting", "token", "logging", "metrics")

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX) or key == f"{ENV_PREFIX}ENVIRONMENT":
                continue

            parts = key[len(ENV_PREFIX):].lower().split("_")
            if len(parts) < 2 or parts[0] not in sections:
                continue

            section = parts[0]
            config_key = "_".join(parts[1:])

            if not isinstance(result.get(section), dict):
                result[section] = {}
            result[section][config_key] = self._parse_env_value(value)

        return result

    def _parse_env_value(self, value: str) -> Union[str, int, float, bool]:
        """Parse environment variable value to appropriate type"""
        if value.lower() in ("true", "yes", "on"):
            return True
        if value.lower() in ("false", "no", "off"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def _apply_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply explicit dot-notation overrides."""
        result = config.copy()

        for key, value in self.overrides.items():
            parts = key.split(".")

            if len(parts) == 1:
                result[key] = value
            elif len(parts) == 2:
                section, config_key = parts
                if not isinstance(result.get(section), dict):
                    result[section] = {}
                else:
                    result[section] = dict(result[section])
                result[section][config_key] = value

        return result

    def _parse_configuration(self, config: Dict[str, Any]):
        """Parse configuration into typed objects"""
        try:
            self.vesting = VestingConfig(**config.get("vesting", {}))
            self.token = TokenConfig(**config.get("token", {}))
            self.logging = LoggingConfig(**config.get("logging", {}))
            self.metrics = MetricsConfig(**config.get("metrics", {}))
        except TypeError as exc:
            raise ConfigurationError(f"Unknown configuration key: {exc}") from exc

    def _validate_configuration(self):
        """Validate all configuration sections"""
        self.vesting.validate()
        self.token.validate()
        self.logging.validate()
        self.metrics.validate()

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation key

        Args:
            key: Configuration key (e.g., "vesting.seconds_per_day")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        parts = key.split(".")
        value: Any = self.to_dict()

        for part in parts:
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default

        return value

    def get_section(self, section: str) -> Optional[Dict[str, Any]]:
        return self.to_dict().get(section)

    def to_dict(self) -> Dict[str, Any]:
        """Export the parsed configuration to a dictionary"""
        return {
            "environment": self.environment.value,
            "vesting": asdict(self.vesting),
            "token": asdict(self.token),
            "logging": asdict(self.logging),
            "metrics": asdict(self.metrics),
        }

    def reload(self):
        """Reload configuration from files"""
        self._load_configuration()

    def __repr__(self) -> str:
        return f"ConfigManager(environment={self.environment.value})"


# Singleton instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(
    environment: Optional[str] = None,
    config_dir: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    force_reload: bool = False
) -> ConfigManager:
    """
    Get or create ConfigManager singleton instance

    Args:
        environment: Environment name
        config_dir: Config directory path
        overrides: Dot-notation overrides
        force_reload: Force reload configuration

    Returns:
        ConfigManager instance
    """
    global _config_manager

    if _config_manager is None or force_reload:
        _config_manager = ConfigManager(
            environment=environment,
            config_dir=config_dir,
            overrides=overrides
        )

    return _config_manager
