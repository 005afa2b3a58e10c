"""Exceptions raised outside the estimator intake path."""


class QuatFusionError(Exception):
    """Base exception for quatfusion errors."""
    pass


class ConfigurationError(QuatFusionError):
    """Invalid fusion mode or gain constants."""
    pass


class SampleLogError(QuatFusionError):
    """Malformed recorded sample log."""

    def __init__(self, message: str, line: int = 0):
        self.line = line
        if line:
            message = f"line {line}: {message}"
        super().__init__(message)
