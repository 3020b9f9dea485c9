"""
Configuration Management System for the CodeCheck client

This module provides a centralized configuration system that supports a 4-tier
precedence hierarchy: environment → project → user → system defaults.
"""

import logging
import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, ConfigDict, ValidationError
from enum import Enum

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_DIR = Path(__file__).resolve().parent.parent / "config" / "settings"


class ValidationLevel(Enum):
    """Configuration validation strictness levels"""
    STRICT = "strict"      # Fail fast on validation errors
    LENIENT = "lenient"    # Log warnings, use defaults


class LedgerConfig(BaseModel):
    """Ledger contract gateway configuration"""
    model_config = ConfigDict(extra='forbid')

    rpc_url: str = Field(default="http://localhost:8545", description="JSON-RPC contract gateway URL")
    contract_address: str = Field(default="", description="Address of the code check contract")
    request_timeout: float = Field(default=30.0, ge=1.0, le=300.0, description="Per-request timeout (seconds)")
    confirmation_timeout: float = Field(default=120.0, ge=1.0, le=3600.0, description="Max wait for a receipt (seconds)")
    confirmation_poll_interval: float = Field(default=1.0, ge=0.01, le=60.0, description="Receipt polling interval (seconds)")


class CryptoConfig(BaseModel):
    """Homomorphic encryption service configuration"""
    model_config = ConfigDict(extra='forbid')

    service_url: str = Field(default="http://localhost:8600", description="Crypto service base URL")
    request_timeout: float = Field(default=60.0, ge=1.0, le=600.0, description="Per-request timeout (seconds)")


class StatusConfig(BaseModel):
    """Status channel auto-dismiss delays"""
    model_config = ConfigDict(extra='forbid')

    success_dismiss_seconds: float = Field(default=2.0, ge=0.0, le=60.0)
    error_dismiss_seconds: float = Field(default=3.0, ge=0.0, le=60.0)
    pending_dismiss_seconds: float = Field(default=3.0, ge=0.0, le=60.0)


class RecordsConfig(BaseModel):
    """Record listing configuration"""
    model_config = ConfigDict(extra='forbid')

    page_size: int = Field(default=5, ge=1, le=500, description="Records per page")
    high_value_threshold: int = Field(default=70, ge=0, le=100, description="Figure above which a record counts as high similarity")
    estimate_seed: Optional[int] = Field(default=None, description="Seed for the placeholder similarity engine")


class LoggingConfig(BaseModel):
    """Logging configuration"""
    model_config = ConfigDict(extra='forbid')

    level: str = Field(default="DEBUG", description="File log level")
    log_dir: str = Field(default="data/logs", description="Directory for rotating log files")
    console_level: str = Field(default="WARNING", description="Console log level")


class SystemConfig(BaseModel):
    """Complete system configuration"""
    model_config = ConfigDict(extra='forbid')

    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    crypto: CryptoConfig = Field(default_factory=CryptoConfig)
    status: StatusConfig = Field(default_factory=StatusConfig)
    records: RecordsConfig = Field(default_factory=RecordsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Metadata
    schema_version: int = Field(default=1, description="Configuration schema version")


# Environment variable → (section, key, type)
ENV_MAP: Dict[str, tuple] = {
    'LEDGER_RPC_URL': ('ledger', 'rpc_url', str),
    'LEDGER_CONTRACT_ADDRESS': ('ledger', 'contract_address', str),
    'LEDGER_CONFIRMATION_TIMEOUT': ('ledger', 'confirmation_timeout', float),
    'CRYPTO_SERVICE_URL': ('crypto', 'service_url', str),
    'CRYPTO_REQUEST_TIMEOUT': ('crypto', 'request_timeout', float),
    'STATUS_SUCCESS_DISMISS': ('status', 'success_dismiss_seconds', float),
    'STATUS_ERROR_DISMISS': ('status', 'error_dismiss_seconds', float),
    'RECORDS_PAGE_SIZE': ('records', 'page_size', int),
    'LOG_LEVEL': ('logging', 'level', str),
}


class ConfigManager:
    """Centralized configuration manager with 4-tier precedence hierarchy"""

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir else DEFAULT_SETTINGS_DIR
        self._system_config: Optional[SystemConfig] = None
        self._user_config: Optional[Dict[str, Any]] = None
        self._project_config: Optional[Dict[str, Any]] = None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """Load YAML configuration file"""
        if not file_path.exists():
            return {}

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.warning(f"Failed to load {file_path}: {e}")
            return {}

    def _save_yaml_file(self, file_path: Path, data: Dict[str, Any]) -> bool:
        """Save configuration to YAML file"""
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                yaml.dump(data, f, default_flow_style=False, sort_keys=False, indent=2)
            return True
        except OSError as e:
            logger.error(f"Failed to save {file_path}: {e}")
            return False

    def _load_system_defaults(self) -> SystemConfig:
        """Load system default configuration"""
        if self._system_config is None:
            defaults_dict = self._load_yaml_file(self.config_dir / "defaults.yaml")

            try:
                self._system_config = SystemConfig(**defaults_dict)
            except ValidationError as e:
                logger.warning(f"System defaults validation failed: {e}")
                self._system_config = SystemConfig()

        return self._system_config

    def _load_user_config(self) -> Dict[str, Any]:
        """Load user-level configuration"""
        if self._user_config is None:
            self._user_config = self._load_yaml_file(self.config_dir / "user.yaml")

        return self._user_config

    def _load_project_config(self) -> Dict[str, Any]:
        """Load project-specific configuration"""
        if self._project_config is None:
            self._project_config = self._load_yaml_file(self.config_dir / "project.yaml")

        return self._project_config

    def _merge_configs(self) -> Dict[str, Any]:
        """Merge configurations with precedence: env → project → user → system"""
        merged = self._load_system_defaults().model_dump()

        self._deep_merge(merged, self._load_user_config())
        self._deep_merge(merged, self._load_project_config())
        self._deep_merge(merged, self._get_env_overrides())

        return merged

    def _deep_merge(self, base: Dict[str, Any], updates: Dict[str, Any]) -> None:
        """Deep merge configuration dictionaries"""
        for key, value in updates.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _get_env_overrides(self) -> Dict[str, Any]:
        """Extract configuration overrides from environment variables"""
        overrides: Dict[str, Any] = {}
        for env_key, (section, config_key, cast) in ENV_MAP.items():
            value = os.getenv(env_key)
            if value is None:
                continue
            try:
                converted = cast(value)
            except ValueError:
                logger.warning(f"Ignoring {env_key}={value!r}: expected {cast.__name__}")
                continue
            overrides.setdefault(section, {})[config_key] = converted

        return overrides

    def get_config(self, validation_level: ValidationLevel = ValidationLevel.STRICT) -> SystemConfig:
        """Get merged configuration with validation"""
        merged_config = self._merge_configs()

        try:
            return SystemConfig(**merged_config)
        except ValidationError as e:
            if validation_level == ValidationLevel.STRICT:
                raise ConfigurationError(f"Configuration validation failed: {e}") from e
            logger.warning(f"Configuration validation failed, using defaults: {e}")
            return SystemConfig()

    def save_project_config(self, config_updates: Dict[str, Any]) -> bool:
        """Save project-specific configuration updates"""
        project_path = self.config_dir / "project.yaml"

        existing_config = self._load_yaml_file(project_path)
        self._deep_merge(existing_config, config_updates)

        success = self._save_yaml_file(project_path, existing_config)
        if success:
            # Force reload on next access
            self._project_config = None

        return success

    def reload_config(self) -> None:
        """Clear cached configurations and reload from files"""
        self._system_config = None
        self._user_config = None
        self._project_config = None


# Global instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_dir: Optional[Path] = None) -> ConfigManager:
    """Get global configuration manager instance"""
    global _config_manager
    if _config_manager is None or config_dir is not None:
        _config_manager = ConfigManager(config_dir)
    return _config_manager


def get_config(validation_level: ValidationLevel = ValidationLevel.STRICT) -> SystemConfig:
    """Get current system configuration"""
    return get_config_manager().get_config(validation_level)
