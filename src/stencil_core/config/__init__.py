"""Stencil Configuration - Config loading and management."""

from .loader import (
    ConfigLoader,
    get_config_loader,
    load_config,
    resolve_env_vars,
)
from .models import (
    EngineConfig,
    LoggingConfig,
    TelemetryConfig,
    TemplatesConfig,
)

__all__ = [
    # Config models
    "EngineConfig",
    "TemplatesConfig",
    "LoggingConfig",
    "TelemetryConfig",
    # Loader
    "ConfigLoader",
    "get_config_loader",
    "load_config",
    # Utilities
    "resolve_env_vars",
]
