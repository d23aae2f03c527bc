"""Stencil configuration loader."""

import os
import re
import typing
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from stencil_core.errors import create_error
from stencil_core.logging import get_logger
from stencil_core.types import LogFormat, LogLevel, ValidationIssue, ValidationResult

from .models import EngineConfig

logger = get_logger("config")

CONFIG_ENV_VAR = "STENCIL_CONFIG_PATH"
DEFAULT_CONFIG_FILE = "stencil.yaml"

# Expected scalar types per section, used by validate()
_SECTION_SCHEMA: dict[str, dict[str, type | tuple[type, ...]]] = {
    "templates": {
        "base_dir": str,
        "encoding": str,
        "cache_deferred_includes": bool,
        "max_inheritance_depth": int,
    },
    "logging": {
        "level": str,
        "format": str,
        "configure": bool,
    },
    "telemetry": {
        "enabled": bool,
    },
}


def resolve_env_vars(value: str) -> str:
    """Resolve environment variable references in string.

    Supports:
    - ${VAR} - Required, error if not set
    - ${VAR:-default} - With default value
    - ${VAR:?error message} - Required with custom error

    Args:
        value: String with potential env var references

    Returns:
        String with env vars resolved

    Raises:
        StencilError: If required var not set
    """
    pattern = r"\$\{([^}:]+)(?::([?-])([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        operator = match.group(2)  # '-' or '?' or None
        operand = match.group(3)  # default value or error message

        env_value = os.environ.get(var_name)
        if env_value is not None:
            return env_value

        if operator == "-":
            return operand or ""
        if operator == "?":
            error_msg = operand or f"Required environment variable {var_name} not set"
            raise create_error("CONFIG_INVALID", detail=error_msg)
        raise create_error(
            "CONFIG_INVALID",
            detail=f"Required environment variable {var_name} not set",
        )

    return re.sub(pattern, replacer, value)


def _resolve_env_vars_recursive(data: Any) -> Any:
    if isinstance(data, dict):
        return {k: _resolve_env_vars_recursive(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_resolve_env_vars_recursive(item) for item in data]
    if isinstance(data, str):
        return resolve_env_vars(data)
    return data


class ConfigLoader:
    """Load and validate Stencil configuration."""

    def __init__(self) -> None:
        self._config: EngineConfig | None = None
        self._config_path: Path | None = None

    @property
    def config_path(self) -> Path | None:
        return self._config_path

    def load(self, path: str | Path | None = None, use_defaults: bool = True) -> EngineConfig:
        """Load configuration from file.

        Resolution order if path not specified:
        1. STENCIL_CONFIG_PATH environment variable
        2. ./stencil.yaml
        3. If use_defaults=True and no file found, use default configuration

        Args:
            path: Optional path to config file
            use_defaults: If True, use default config when no file found

        Returns:
            Loaded EngineConfig instance

        Raises:
            StencilError: If file not found (when use_defaults=False) or invalid
        """
        if path is None:
            path = self._resolve_config_path()

        config_path = Path(path)

        if not config_path.exists():
            if use_defaults:
                logger.debug("No config file found, using default configuration")
                return self.load_defaults()
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Configuration file not found: {config_path}",
            )

        try:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Invalid YAML in config file: {e}",
            ) from e

        if not isinstance(data, dict):
            raise create_error(
                "CONFIG_INVALID",
                detail="Configuration root must be a mapping",
            )

        data = _resolve_env_vars_recursive(data)
        return self.load_from_dict(data, config_path)

    def load_defaults(self) -> EngineConfig:
        """Load default configuration without a file.

        Returns:
            EngineConfig with default values
        """
        return self.load_from_dict({})

    def load_from_dict(self, data: dict[str, Any], config_path: Path | None = None) -> EngineConfig:
        """Load configuration from dictionary.

        Args:
            data: Configuration dictionary
            config_path: Optional path to config file (for tracking)

        Returns:
            Loaded EngineConfig instance

        Raises:
            StencilError: If configuration is invalid
        """
        validation = self.validate(data)
        for warning in validation.warnings:
            logger.warning(warning.message, path=warning.path)
        if not validation.valid:
            raise create_error(
                "CONFIG_INVALID",
                detail="Configuration validation failed:\n" + validation.error_report(),
            )

        config = typing.cast(EngineConfig, self._convert_field(EngineConfig, data))

        self._config = config
        self._config_path = config_path
        logger.debug("Configuration loaded", path=str(config_path) if config_path else None)
        return config

    def validate(self, data: dict[str, Any]) -> ValidationResult:
        """Validate config data without loading.

        Args:
            data: Configuration dictionary

        Returns:
            ValidationResult with errors and warnings
        """
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        for key, section in data.items():
            schema = _SECTION_SCHEMA.get(key)
            if schema is None:
                warnings.append(
                    ValidationIssue(
                        path=key,
                        message=f"Unknown configuration key: {key}",
                        severity="warning",
                    )
                )
                continue

            if not isinstance(section, dict):
                errors.append(
                    ValidationIssue(path=key, message=f"{key} must be a dictionary")
                )
                continue

            for name, value in section.items():
                expected = schema.get(name)
                path = f"{key}.{name}"
                if expected is None:
                    warnings.append(
                        ValidationIssue(
                            path=path,
                            message=f"Unknown configuration key: {path}",
                            severity="warning",
                        )
                    )
                # bool is an int subclass; reject it where an int is expected
                elif not isinstance(value, expected) or (
                    expected is int and isinstance(value, bool)
                ):
                    type_name = getattr(expected, "__name__", str(expected))
                    errors.append(
                        ValidationIssue(path=path, message=f"{name} must be of type {type_name}")
                    )

        templates = data.get("templates")
        if isinstance(templates, dict):
            depth = templates.get("max_inheritance_depth")
            if isinstance(depth, int) and not isinstance(depth, bool) and depth <= 0:
                errors.append(
                    ValidationIssue(
                        path="templates.max_inheritance_depth",
                        message="max_inheritance_depth must be a positive integer",
                    )
                )

        logging_section = data.get("logging")
        if isinstance(logging_section, dict):
            for name, enum_type in (("level", LogLevel), ("format", LogFormat)):
                value = logging_section.get(name)
                if isinstance(value, str) and value not in {m.value for m in enum_type}:
                    allowed = ", ".join(m.value for m in enum_type)
                    errors.append(
                        ValidationIssue(
                            path=f"logging.{name}",
                            message=f"{name} must be one of: {allowed}",
                        )
                    )

        return ValidationResult(valid=True, errors=errors, warnings=warnings)

    def get(self) -> EngineConfig:
        """Get current configuration.

        Raises:
            StencilError: If configuration not loaded
        """
        if self._config is None:
            raise create_error("CONFIG_INVALID", detail="Configuration not loaded")
        return self._config

    def _resolve_config_path(self) -> Path:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path)
        return Path(DEFAULT_CONFIG_FILE)

    def _convert_field(self, field_type: Any, value: Any) -> Any:
        """Convert a loaded YAML value to the declared field type.

        Args:
            field_type: Expected field type
            value: Value to convert

        Returns:
            Converted value
        """
        if value is None:
            return None

        if is_dataclass(field_type) and isinstance(field_type, type):
            if not isinstance(value, dict):
                return value
            kwargs = {
                f.name: self._convert_field(f.type, value[f.name])
                for f in fields(field_type)
                if f.name in value
            }
            return field_type(**kwargs)

        if isinstance(field_type, type) and issubclass(field_type, Enum):
            if isinstance(value, str):
                return field_type(value)
            return value

        return value


# Convenience singleton
_default_loader: ConfigLoader | None = None


def get_config_loader() -> ConfigLoader:
    """Get default config loader singleton."""
    global _default_loader  # noqa: PLW0603
    if _default_loader is None:
        _default_loader = ConfigLoader()
    return _default_loader


def load_config(path: str | Path | None = None) -> EngineConfig:
    """Convenience function to load config.

    Args:
        path: Optional path to config file

    Returns:
        Loaded EngineConfig instance
    """
    return get_config_loader().load(path)
