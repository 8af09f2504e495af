"""
ORDEN Configuration System

Configuration for constructing a ledger and for its logging, loaded from
YAML files and environment variables.

Configuration Sources (in order of precedence):
    1. Environment variables (ORDEN_*)
    2. Runtime overrides (ConfigManager.set / YAML files)
    3. Default values

The fee-policy ceilings enforced by set_fee_params are part of the ledger's
economic behaviour and are deliberately not configurable.

Copyright (c) 2026 Momentum. All rights reserved.
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar, Union

import yaml

from orden.arithmetic import is_uint

T = TypeVar("T")


class ConfigError(Exception):
    """Configuration error."""
    pass


class ConfigValidationError(ConfigError):
    """Configuration validation error."""
    pass


@dataclass
class ConfigValue(Generic[T]):
    """
    A single configuration value with metadata.

    Supports default values, environment variable binding,
    validation, and change callbacks.
    """
    default: T
    env_var: Optional[str] = None
    description: str = ""
    validator: Optional[Callable[[T], bool]] = None
    _value: Optional[T] = field(default=None, repr=False)
    _callbacks: List[Callable[[Optional[T], T], None]] = field(default_factory=list, repr=False)

    def get(self) -> T:
        """Get the current value."""
        if self.env_var and self.env_var in os.environ:
            return self._coerce(os.environ[self.env_var])
        return self._value if self._value is not None else self.default

    def set(self, value: T) -> None:
        """Set the value with validation."""
        if self.validator and not self.validator(value):
            raise ConfigValidationError(f"Invalid value for config: {value!r}")

        old_value = self._value
        self._value = value

        for callback in self._callbacks:
            callback(old_value, value)

    def reset(self) -> None:
        self._value = None

    def _coerce(self, value: str) -> T:
        """Coerce string value to target type."""
        target_type = type(self.default)

        if target_type == bool:
            return value.lower() in ("true", "1", "yes", "on")  # type: ignore
        elif target_type == int:
            return int(value)  # type: ignore
        else:
            return value  # type: ignore

    def on_change(self, callback: Callable[[Optional[T], T], None]) -> None:
        self._callbacks.append(callback)


@dataclass
class TokenConfig:
    """Display metadata and initial supply."""
    name: ConfigValue[str] = field(default_factory=lambda: ConfigValue(
        default="Orden Token",
        env_var="ORDEN_TOKEN_NAME",
        description="Token display name",
        validator=lambda x: isinstance(x, str) and 0 < len(x) <= 64,
    ))
    symbol: ConfigValue[str] = field(default_factory=lambda: ConfigValue(
        default="ORD",
        env_var="ORDEN_TOKEN_SYMBOL",
        description="Token ticker symbol",
        validator=lambda x: isinstance(x, str) and 0 < len(x) <= 16,
    ))
    decimals: ConfigValue[int] = field(default_factory=lambda: ConfigValue(
        default=18,
        env_var="ORDEN_TOKEN_DECIMALS",
        description="Decimal precision of the display unit",
        validator=lambda x: isinstance(x, int) and 0 <= x <= 77,
    ))
    initial_supply: ConfigValue[int] = field(default_factory=lambda: ConfigValue(
        default=0,
        env_var="ORDEN_TOKEN_INITIAL_SUPPLY",
        description="Initial supply in base units, credited to the owner",
        validator=is_uint,
    ))


@dataclass
class FeeConfig:
    """Fee parameters in force at construction."""
    basis_points_rate: ConfigValue[int] = field(default_factory=lambda: ConfigValue(
        default=0,
        env_var="ORDEN_FEE_BASIS_POINTS",
        description="Initial fee rate in basis points",
        validator=is_uint,
    ))
    maximum_fee: ConfigValue[int] = field(default_factory=lambda: ConfigValue(
        default=0,
        env_var="ORDEN_FEE_MAXIMUM",
        description="Initial per-transfer fee cap in base units",
        validator=is_uint,
    ))


@dataclass
class ObservabilityConfig:
    """Logging configuration."""
    log_level: ConfigValue[str] = field(default_factory=lambda: ConfigValue(
        default="info",
        env_var="ORDEN_LOG_LEVEL",
        description="Log level (debug, info, warning, error)",
        validator=lambda x: x in ("debug", "info", "warning", "error", "critical"),
    ))
    log_format: ConfigValue[str] = field(default_factory=lambda: ConfigValue(
        default="json",
        env_var="ORDEN_LOG_FORMAT",
        description="Log format (json, text)",
        validator=lambda x: x in ("json", "text"),
    ))


@dataclass
class OrdenConfig:
    """Root configuration."""
    token: TokenConfig = field(default_factory=TokenConfig)
    fees: FeeConfig = field(default_factory=FeeConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    def to_dict(self) -> Dict[str, Any]:
        def extract_values(obj: Any) -> Any:
            if isinstance(obj, ConfigValue):
                return obj.get()
            elif hasattr(obj, "__dataclass_fields__"):
                return {k: extract_values(getattr(obj, k)) for k in obj.__dataclass_fields__}
            return obj

        return extract_values(self)

    def to_yaml(self) -> str:
        return yaml.dump(self.to_dict(), default_flow_style=False)


def apply_dict(config: OrdenConfig, data: Dict[str, Any]) -> None:
    """Apply nested dictionary values onto a configuration."""
    def apply_to_config(config_obj: Any, values: Dict[str, Any], path: str) -> None:
        for key, value in values.items():
            key_path = f"{path}.{key}" if path else key
            if not hasattr(config_obj, key):
                raise ConfigError(f"Unknown config key: {key_path}")
            attr = getattr(config_obj, key)
            if isinstance(attr, ConfigValue):
                attr.set(value)
            elif hasattr(attr, "__dataclass_fields__") and isinstance(value, dict):
                apply_to_config(attr, value, key_path)
            else:
                raise ConfigError(f"Invalid config section: {key_path}")

    apply_to_config(config, data, "")


def load_config(path: Union[str, Path]) -> OrdenConfig:
    """Build a fresh configuration from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    config = OrdenConfig()
    if data:
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration root must be a mapping: {path}")
        apply_dict(config, data)
    return config


class ConfigManager:
    """
    Configuration manager with file loading and environment binding.

    Thread-safe singleton that manages configuration lifecycle.
    """

    _instance: Optional["ConfigManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "ConfigManager":
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._initialized = False
            return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._config = OrdenConfig()
        self._config_paths: List[Path] = []
        self._initialized = True

    @property
    def config(self) -> OrdenConfig:
        return self._config

    def load_from_file(self, path: Union[str, Path]) -> None:
        """Load configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        if data:
            apply_dict(self._config, data)
            self._config_paths.append(path)

    def set(self, path: str, value: Any) -> None:
        """
        Set a configuration value by path.

        Example: manager.set("token.decimals", 6)
        """
        parts = path.split(".")
        obj: Any = self._config

        for part in parts[:-1]:
            obj = getattr(obj, part)

        attr = getattr(obj, parts[-1], None)
        if isinstance(attr, ConfigValue):
            attr.set(value)
        else:
            raise ConfigError(f"Invalid config path: {path}")

    def get(self, path: str) -> Any:
        """
        Get a configuration value by path.

        Example: manager.get("fees.maximum_fee")
        """
        obj: Any = self._config
        for part in path.split("."):
            if not hasattr(obj, part):
                raise ConfigError(f"Invalid config path: {path}")
            obj = getattr(obj, part)

        if isinstance(obj, ConfigValue):
            return obj.get()
        return obj

    def reset(self) -> None:
        """Drop all loaded values and return to defaults."""
        self._config = OrdenConfig()
        self._config_paths = []

    def validate(self) -> List[str]:
        """
        Validate all configuration values.

        Returns list of validation errors.
        """
        errors: List[str] = []

        def validate_config(obj: Any, path: str = "") -> None:
            if isinstance(obj, ConfigValue):
                try:
                    value = obj.get()
                    if obj.validator and not obj.validator(value):
                        errors.append(f"{path}: validation failed for value {value!r}")
                except Exception as e:
                    errors.append(f"{path}: {e}")
            elif hasattr(obj, "__dataclass_fields__"):
                for field_name in obj.__dataclass_fields__:
                    field_path = f"{path}.{field_name}" if path else field_name
                    validate_config(getattr(obj, field_name), field_path)

        validate_config(self._config)
        return errors


def get_config() -> OrdenConfig:
    return ConfigManager().config


def get_config_manager() -> ConfigManager:
    return ConfigManager()
