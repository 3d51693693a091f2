"""Configuration schemas package."""

from .deptrac_schema import AnalyserConfig, DeptracConfig, EmitterType, validate_deptrac_config
from .logging_schema import LogDestination, LoggingConfig

__all__ = [
    "AnalyserConfig",
    "DeptracConfig",
    "EmitterType",
    "validate_deptrac_config",
    "LogDestination",
    "LoggingConfig",
]
