"""Configuration package with clean public API."""

from .schemas import (
    AnalyserConfig,
    DeptracConfig,
    EmitterType,
    LogDestination,
    LoggingConfig,
    validate_deptrac_config,
)

__all__ = [
    "AnalyserConfig",
    "DeptracConfig",
    "EmitterType",
    "validate_deptrac_config",
    "LogDestination",
    "LoggingConfig",
]
