"""Stencil configuration data models."""

from dataclasses import dataclass, field

from stencil_core.types import LogFormat, LogLevel


@dataclass
class TemplatesConfig:
    """Template loading configuration."""

    base_dir: str = "."  # Relative template names resolve against this directory
    encoding: str = "utf-8"
    cache_deferred_includes: bool = False
    max_inheritance_depth: int = 32  # Longest allowed extends/include nesting at compile time


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    configure: bool = False  # Install a handler on the "stencil" logger at engine startup


@dataclass
class TelemetryConfig:
    """Telemetry configuration."""

    enabled: bool = True


@dataclass
class EngineConfig:
    """Root configuration object."""

    templates: TemplatesConfig = field(default_factory=TemplatesConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
