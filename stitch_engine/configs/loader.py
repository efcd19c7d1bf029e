"""Configuration loader for the stitch engine.

Loads and validates ``engine.yaml`` into typed, frozen dataclasses.
Rewrite thresholds, the normalization pipeline, output format and
logging setup all come from the config -- scripts hardcode none of them.

Usage::

    from stitch_engine.configs.loader import load_config
    cfg = load_config()                      # default path
    cfg = load_config("/custom/engine.yaml") # explicit path
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from src.utils.fs import load_yaml

logger = logging.getLogger(__name__)

KNOWN_PASSES = ("interpolate_trim", "merge_jumps", "stable")
OUTPUT_FORMATS = ("yaml", "json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


# ---------------------------------------------------------------------------
# Dataclasses -- mirror the YAML structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RewriteConfig:
    """Parameters of the individual rewrite passes."""

    jumps_required_to_trim: int


@dataclass(frozen=True)
class NormalizeConfig:
    """Normalization pipeline.

    ``passes`` run in order; ``fix_colour_count`` and
    ``centre_on_origin`` are applied to the final pattern.
    """

    passes: tuple[str, ...]
    fix_colour_count: bool = True
    centre_on_origin: bool = False


@dataclass(frozen=True)
class OutputConfig:
    """How normalized patterns are written."""

    format: str = "yaml"

    @property
    def suffix(self) -> str:
        return f".{self.format}"


@dataclass(frozen=True)
class LoggingConfig:
    """Arguments for ``src.utils.logging_config.setup_logging``."""

    level: str = "INFO"
    json: bool = False
    color: bool = True
    file: str | None = None


@dataclass(frozen=True)
class EngineConfig:
    """Complete engine configuration loaded from ``engine.yaml``."""

    rewrite: RewriteConfig
    normalize: NormalizeConfig
    output: OutputConfig
    logging: LoggingConfig

    def with_overrides(
        self,
        *,
        passes: tuple[str, ...] | None = None,
        jumps_required_to_trim: int | None = None,
        output_format: str | None = None,
        log_level: str | None = None,
    ) -> EngineConfig:
        """Return a validated copy with command-line overrides applied."""
        rewrite = self.rewrite
        if jumps_required_to_trim is not None:
            rewrite = RewriteConfig(jumps_required_to_trim=jumps_required_to_trim)
        normalize = self.normalize
        if passes is not None:
            normalize = NormalizeConfig(
                passes=tuple(passes),
                fix_colour_count=normalize.fix_colour_count,
                centre_on_origin=normalize.centre_on_origin,
            )
        output = self.output
        if output_format is not None:
            output = OutputConfig(format=output_format)
        log_cfg = self.logging
        if log_level is not None:
            log_cfg = LoggingConfig(
                level=log_level.upper(),
                json=log_cfg.json,
                color=log_cfg.color,
                file=log_cfg.file,
            )
        config = EngineConfig(
            rewrite=rewrite, normalize=normalize, output=output, logging=log_cfg
        )
        _validate_config(config)
        return config


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _validate_config(cfg: EngineConfig) -> None:
    """Validate value ranges and names.

    Raises
    ------
    ConfigError
        On any invalid value.
    """
    if cfg.rewrite.jumps_required_to_trim < 1:
        raise ConfigError(
            "rewrite.jumps_required_to_trim must be >= 1, "
            f"got {cfg.rewrite.jumps_required_to_trim}"
        )

    unknown = [name for name in cfg.normalize.passes if name not in KNOWN_PASSES]
    if unknown:
        raise ConfigError(
            f"Unknown normalize pass(es) {unknown}; expected any of {list(KNOWN_PASSES)}"
        )

    if cfg.output.format not in OUTPUT_FORMATS:
        raise ConfigError(
            f"output.format must be one of {list(OUTPUT_FORMATS)}, got {cfg.output.format!r}"
        )

    if cfg.logging.level not in LOG_LEVELS:
        raise ConfigError(
            f"logging.level must be one of {list(LOG_LEVELS)}, got {cfg.logging.level!r}"
        )

    if "stable" in cfg.normalize.passes and cfg.normalize.passes[-1] != "stable":
        logger.warning(
            "Pass 'stable' is followed by %s; later passes may reintroduce "
            "non-canonical markers",
            list(cfg.normalize.passes[cfg.normalize.passes.index("stable") + 1:]),
        )


def _as_bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be true or false, got {value!r}")
    return value


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(path: str | Path | None = None) -> EngineConfig:
    """Load and validate engine configuration from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to ``engine.yaml``.  ``None`` loads the default shipped
        alongside this module.

    Returns
    -------
    EngineConfig
        Fully validated, frozen configuration object.

    Raises
    ------
    ConfigError
        If any field is missing or fails validation.
    FileNotFoundError
        If *path* does not exist.
    """
    if path is None:
        path = Path(__file__).parent / "engine.yaml"
    else:
        path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.info("Loading configuration from %s", path)

    data: dict[str, Any] = load_yaml(path)
    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {path}")

    try:
        # -- rewrite --------------------------------------------------------
        rw = data["rewrite"]
        rewrite = RewriteConfig(
            jumps_required_to_trim=int(rw["jumps_required_to_trim"]),
        )

        # -- normalize ------------------------------------------------------
        nd = data["normalize"]
        passes = nd.get("passes") or []
        if isinstance(passes, str):
            raise ConfigError("normalize.passes must be a list of pass names")
        normalize = NormalizeConfig(
            passes=tuple(str(name) for name in passes),
            fix_colour_count=_as_bool(
                nd.get("fix_colour_count", True), "normalize.fix_colour_count"
            ),
            centre_on_origin=_as_bool(
                nd.get("centre_on_origin", False), "normalize.centre_on_origin"
            ),
        )

        # -- output (optional) ----------------------------------------------
        od = data.get("output") or {}
        output = OutputConfig(format=str(od.get("format", "yaml")).lower())

        # -- logging (optional) ---------------------------------------------
        ld = data.get("logging") or {}
        log_file = ld.get("file")
        log_cfg = LoggingConfig(
            level=str(ld.get("level", "INFO")).upper(),
            json=_as_bool(ld.get("json", False), "logging.json"),
            color=_as_bool(ld.get("color", True), "logging.color"),
            file=str(log_file) if log_file else None,
        )

        config = EngineConfig(
            rewrite=rewrite,
            normalize=normalize,
            output=output,
            logging=log_cfg,
        )

        _validate_config(config)
        logger.info("Configuration loaded successfully")
        return config

    except KeyError as exc:
        raise ConfigError(
            f"Missing required configuration key: {exc}"
        ) from exc
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"Invalid configuration value: {exc}"
        ) from exc
