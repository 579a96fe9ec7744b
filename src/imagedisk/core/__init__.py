"""
Core configuration for the ImageDisk reader.
"""

from imagedisk.core.settings import (
    SettingsError,
    LogLevel,
    LoggingSettings,
    ExportSettings,
    DisplaySettings,
    Settings,
    get_settings_dir,
    get_settings_file,
    load_settings,
    save_settings,
)

__all__ = [
    "SettingsError",
    "LogLevel",
    "LoggingSettings",
    "ExportSettings",
    "DisplaySettings",
    "Settings",
    "get_settings_dir",
    "get_settings_file",
    "load_settings",
    "save_settings",
]
