"""
Configuration package for the Overseas Access Tracker.
"""

from .settings import (
    Settings,
    Environment,
    LogLevel,
    DatabaseSettings,
    SecuritySettings,
    SchedulerSettings,
    MailSettings,
    settings,
    get_settings,
    reload_settings,
)

__all__ = [
    "Settings",
    "Environment",
    "LogLevel",
    "DatabaseSettings",
    "SecuritySettings",
    "SchedulerSettings",
    "MailSettings",
    "settings",
    "get_settings",
    "reload_settings",
]
