"""
CALMe Configuration Module

Provides centralized configuration management with:
- Environment-based settings loading
- Validation of dialogue and metrics options
"""

from calme.config.settings import (
    DialogueSettings,
    MetricsSettings,
    Settings,
    get_settings,
)

__all__ = ["DialogueSettings", "MetricsSettings", "Settings", "get_settings"]
