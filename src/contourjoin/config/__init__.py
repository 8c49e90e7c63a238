"""Configuration management for contourjoin.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- ToleranceConfig: Per-axis endpoint matching tolerances
- JoinConfig: Contour joining settings
- ProcessingConfig: Batch processing settings
- LoggingConfig: Logging settings
- JoinerSettings: Main application settings
"""

from contourjoin.config.settings import (
    JoinConfig,
    JoinerSettings,
    LoggingConfig,
    ProcessingConfig,
    ToleranceConfig,
    UnresolvedPolicy,
    get_default_settings,
)

__all__ = [
    "JoinConfig",
    "JoinerSettings",
    "LoggingConfig",
    "ProcessingConfig",
    "ToleranceConfig",
    "UnresolvedPolicy",
    "get_default_settings",
]
