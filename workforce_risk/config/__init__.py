"""
Configuration package for Workforce Risk.

Contains:
- settings: Environment-based configuration
- datadog_logger: Root logger setup and Datadog log shipping
"""

from workforce_risk.config.settings import Settings, get_settings, load_settings_from_env

__all__ = [
    "Settings",
    "get_settings",
    "load_settings_from_env",
]
