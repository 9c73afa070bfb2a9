"""Settings package exports."""

from .loader import (
    DEFAULT_BLOCKED_LANGUAGES,
    ApiSettings,
    AppConfig,
    LoggingSettings,
    PathSettings,
    PolicySettings,
    load_config,
    project_path,
)

__all__ = [
    "DEFAULT_BLOCKED_LANGUAGES",
    "ApiSettings",
    "AppConfig",
    "LoggingSettings",
    "PathSettings",
    "PolicySettings",
    "load_config",
    "project_path",
]
