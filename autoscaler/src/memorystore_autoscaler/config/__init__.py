"""
Configuration module for scaler settings
"""

from .settings import (
    Settings,
    settings,
    StateSettings,
    ClusterApiSettings,
    RedisSettings,
    LoggingSettings,
    PrometheusSettings,
    ApiSettings,
)

__all__ = [
    "Settings",
    "settings",
    "StateSettings",
    "ClusterApiSettings",
    "RedisSettings",
    "LoggingSettings",
    "PrometheusSettings",
    "ApiSettings",
]
