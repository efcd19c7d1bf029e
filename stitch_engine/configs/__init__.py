"""Engine configuration loading and validation."""

from stitch_engine.configs.loader import (
    ConfigError,
    EngineConfig,
    LoggingConfig,
    NormalizeConfig,
    OutputConfig,
    RewriteConfig,
    load_config,
)

__all__ = [
    "ConfigError",
    "EngineConfig",
    "LoggingConfig",
    "NormalizeConfig",
    "OutputConfig",
    "RewriteConfig",
    "load_config",
]
