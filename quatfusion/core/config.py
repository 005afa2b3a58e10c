"""Configuration management for quaternion orientation fusion."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import logging
import math
import os

import yaml

from .errors import ConfigurationError
from .modes import (
    FusionMode,
    DEFAULT_SLERP_POWER,
    DEFAULT_Q_VALUE,
    DEFAULT_R_VALUE,
    check_slerp_power,
    check_noise_gains,
)

logger = logging.getLogger(__name__)


@dataclass
class FusionConfig:
    """Estimator configuration, fixed for the estimator's lifetime.

    ``slerp_power`` applies in slerp mode, ``q_value`` and ``r_value``
    in linear mode.
    """
    mode: str = FusionMode.LINEAR.value
    slerp_power: float = DEFAULT_SLERP_POWER
    q_value: float = DEFAULT_Q_VALUE
    r_value: float = DEFAULT_R_VALUE
    enable_gyro: bool = True
    enable_accel: bool = True
    enable_compass: bool = True
    debug: bool = False


@dataclass
class CalibrationConfig:
    """Static calibration constants."""
    compass_declination_deg: float = 0.0

    @property
    def compass_declination(self) -> float:
        """Magnetic declination in radians."""
        return math.radians(self.compass_declination_deg)


@dataclass
class QuaternionValidationConfig:
    """Quaternion validation configuration."""
    norm_tolerance: float = 1e-6


@dataclass
class TimestampValidationConfig:
    """Timestamp validation configuration."""
    max_dt_s: float = 0.5


@dataclass
class ValidationConfig:
    """Validation configuration."""
    quaternion: QuaternionValidationConfig = field(default_factory=QuaternionValidationConfig)
    timestamp: TimestampValidationConfig = field(default_factory=TimestampValidationConfig)


@dataclass
class MonitoringConfig:
    """Cycle statistics configuration."""
    window_size: int = 1000
    log_interval_samples: int = 1000


@dataclass
class Config:
    """Complete configuration for quaternion orientation fusion."""
    fusion: FusionConfig = field(default_factory=FusionConfig)
    calibration: CalibrationConfig = field(default_factory=CalibrationConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)


def validate_fusion_config(cfg: FusionConfig) -> None:
    """Check mode and gain constants.

    Raises:
        ConfigurationError: If the mode is unknown or a gain is out of range.
    """
    FusionMode.parse(cfg.mode)
    check_slerp_power(cfg.slerp_power)
    check_noise_gains(cfg.q_value, cfg.r_value)


def default_config_path() -> Path:
    """Location of the packaged default configuration file."""
    return Path(__file__).parent.parent / "config" / "default.yaml"


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file. If None, uses
            ``QUATFUSION_CONFIG_PATH`` or the packaged default.

    Returns:
        Configuration object with all settings.

    Raises:
        FileNotFoundError: If specified config file doesn't exist.
        ConfigurationError: If the file holds invalid fusion settings.
    """
    if config_path is None:
        env_path = os.environ.get("QUATFUSION_CONFIG_PATH")
        if env_path:
            config_path = env_path
        else:
            default_path = default_config_path()
            if default_path.exists():
                config_path = str(default_path)
            else:
                return Config()

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    logger.debug("Loaded configuration from %s", path)

    if data is None:
        return Config()

    return build_config(data)


def _section(data: dict, key: str) -> dict:
    """Mapping stored under ``key``; a missing or empty section is ``{}``."""
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(
            f"Section {key!r} must be a mapping, got {type(value).__name__}"
        )
    return value


def build_config(data: dict) -> Config:
    """Build Config object from dictionary.

    Raises:
        ConfigurationError: If the layout, a key or a fusion setting is invalid.
    """
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration must be a mapping, got {type(data).__name__}"
        )

    val_data = _section(data, "validation")
    try:
        fusion = FusionConfig(**_section(data, "fusion"))
        calibration = CalibrationConfig(**_section(data, "calibration"))
        validation = ValidationConfig(
            quaternion=QuaternionValidationConfig(**_section(val_data, "quaternion")),
            timestamp=TimestampValidationConfig(**_section(val_data, "timestamp")),
        )
        monitoring = MonitoringConfig(**_section(data, "monitoring"))
    except TypeError as exc:
        raise ConfigurationError(f"Invalid configuration key: {exc}") from exc

    fusion.mode = str(fusion.mode).lower()
    validate_fusion_config(fusion)

    return Config(
        fusion=fusion,
        calibration=calibration,
        validation=validation,
        monitoring=monitoring,
    )
