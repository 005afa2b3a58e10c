"""Fusion modes, default gains and their valid ranges."""

from enum import Enum

from .errors import ConfigurationError

DEFAULT_SLERP_POWER = 0.02
DEFAULT_Q_VALUE = 0.001
DEFAULT_R_VALUE = 0.0005


class FusionMode(Enum):
    """Correction strategy selected once at construction."""
    SLERP = "slerp"
    LINEAR = "linear"

    @classmethod
    def parse(cls, value) -> "FusionMode":
        """Accept a FusionMode or its string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ConfigurationError(
                f"Unknown fusion mode {value!r}, expected one of {FUSION_MODES}"
            ) from None


FUSION_MODES = tuple(mode.value for mode in FusionMode)


def check_slerp_power(slerp_power: float) -> float:
    """Return the slerp power as float.

    Raises:
        ConfigurationError: If it lies outside [0, 1].
    """
    if not 0.0 <= slerp_power <= 1.0:
        raise ConfigurationError(f"slerp_power must be in [0, 1], got {slerp_power}")
    return float(slerp_power)


def check_noise_gains(q_value: float, r_value: float) -> tuple:
    """Return (Q, R) as floats.

    Raises:
        ConfigurationError: If either is negative.
    """
    if q_value < 0.0 or r_value < 0.0:
        raise ConfigurationError(
            f"q_value and r_value must be non-negative, got Q={q_value}, R={r_value}"
        )
    return float(q_value), float(r_value)
