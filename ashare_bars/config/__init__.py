"""
Configuration system: schemas and loaders
"""

from .schemas import (
    CalendarConfig,
    DataConfig,
    ResampleConfig,
    AppConfig,
)
from .loader import load_config, apply_env_overrides, apply_cli_overrides

__all__ = [
    "CalendarConfig",
    "DataConfig",
    "ResampleConfig",
    "AppConfig",
    "load_config",
    "apply_env_overrides",
    "apply_cli_overrides",
]
