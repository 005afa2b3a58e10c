"""Diagnostics observers for the fusion estimator."""

from .observer import FusionObserver, LoggingObserver, CallbackObserver
from .metrics import CycleStatsObserver, FusionStats

__all__ = [
    "FusionObserver",
    "LoggingObserver",
    "CallbackObserver",
    "CycleStatsObserver",
    "FusionStats",
]
