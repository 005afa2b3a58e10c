"""Sample sources for the fusion estimator."""

from .sample_log import read_sample_log, parse_sample_line, SampleLogWriter, LOG_HEADER
from .synthetic import SyntheticImu

__all__ = [
    "read_sample_log",
    "parse_sample_line",
    "SampleLogWriter",
    "LOG_HEADER",
    "SyntheticImu",
]
