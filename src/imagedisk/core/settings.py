"""
Settings management module for the ImageDisk reader.

This module provides settings models with JSON-based persistence in a
platform-specific configuration directory.

Features:
    - pydantic models with range validation
    - JSON configuration file persistence (atomic write)
    - Platform-specific settings paths
    - Version field for future migrations

Settings Categories:
    - Logging: Level, optional log file
    - Export: Raw image fill byte
    - Display: Sector listing, hex dumps
"""

import json
import logging
import os
import sys
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

# Module logger
logger = logging.getLogger(__name__)


# =============================================================================
# Settings File Paths
# =============================================================================

def get_settings_dir() -> Path:
    """
    Get the platform-specific settings directory.

    Returns:
        Path to settings directory

    Platform paths:
        - Linux: ~/.config/imagedisk-reader/
        - Windows: %APPDATA%/ImageDiskReader/
        - macOS: ~/Library/Application Support/ImageDiskReader/
    """
    if sys.platform == 'win32':
        base = Path(os.environ.get('APPDATA', Path.home() / 'AppData' / 'Roaming'))
        return base / 'ImageDiskReader'
    elif sys.platform == 'darwin':
        return Path.home() / 'Library' / 'Application Support' / 'ImageDiskReader'
    else:
        # Linux and other Unix-like
        xdg_config = os.environ.get('XDG_CONFIG_HOME', Path.home() / '.config')
        return Path(xdg_config) / 'imagedisk-reader'


def get_settings_file() -> Path:
    """Get the settings file path."""
    return get_settings_dir() / 'settings.json'


# =============================================================================
# Exceptions and Enumerations
# =============================================================================

class SettingsError(Exception):
    """Raised when a settings file cannot be read, parsed or written."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.message = message
        self.path = path
        super().__init__(f"{message} [File: {path}]" if path else message)


class LogLevel(str, Enum):
    """Logging level names accepted in the settings file."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"

    def to_logging(self) -> int:
        return getattr(logging, self.value)


# =============================================================================
# Settings Models
# =============================================================================

class LoggingSettings(BaseModel):
    """Logging settings."""
    model_config = ConfigDict(extra='ignore', validate_assignment=True)

    level: LogLevel = LogLevel.WARNING       # Console/file logging level
    log_file: Optional[str] = None           # Also log to this file


class ExportSettings(BaseModel):
    """Raw export settings."""
    model_config = ConfigDict(extra='ignore', validate_assignment=True)

    fill_byte: int = Field(default=0xE5, ge=0, le=0xFF)  # Unavailable sectors


class DisplaySettings(BaseModel):
    """Console output settings."""
    model_config = ConfigDict(extra='ignore', validate_assignment=True)

    show_sectors: bool = False               # List every sector record
    hexdump: bool = False                    # Hex dump sector contents
    show_comment: bool = True                # Print the image comment


class Settings(BaseModel):
    """
    Settings for the ImageDisk reader.

    Usage:
        settings = load_settings()
        settings.export.fill_byte = 0x00
        save_settings(settings)
    """
    model_config = ConfigDict(extra='ignore', validate_assignment=True)

    # Settings version for migration
    version: int = 1
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    export: ExportSettings = Field(default_factory=ExportSettings)
    display: DisplaySettings = Field(default_factory=DisplaySettings)


SETTINGS_VERSION = 1


# =============================================================================
# Persistence
# =============================================================================

def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Load settings from a JSON file.

    Args:
        path: Settings file; defaults to get_settings_file()

    Returns:
        Loaded settings, or defaults if the file does not exist

    Raises:
        SettingsError: If the file cannot be read or holds invalid settings
    """
    settings_file = Path(path) if path is not None else get_settings_file()

    if not settings_file.exists():
        logger.info("Settings file not found: %s", settings_file)
        return Settings()

    try:
        with open(settings_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise SettingsError(f"Invalid JSON in settings file: {e}", settings_file) from e
    except OSError as e:
        raise SettingsError(f"Cannot read settings: {e}", settings_file) from e

    if not isinstance(data, dict):
        raise SettingsError("Settings file must hold a JSON object", settings_file)

    version = data.get('version', 0)
    if isinstance(version, int) and version < SETTINGS_VERSION:
        data = _migrate_settings(data, version)

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings: {e}", settings_file) from e

    logger.info("Settings loaded from %s", settings_file)
    return settings


def save_settings(settings: Settings, path: Optional[Union[str, Path]] = None) -> Path:
    """
    Save settings to a JSON file.

    Writes to a temporary file first, then renames it over the target.

    Args:
        settings: Settings to save
        path: Settings file; defaults to get_settings_file()

    Returns:
        Path written

    Raises:
        SettingsError: If the file cannot be written
    """
    settings_file = Path(path) if path is not None else get_settings_file()

    data = settings.model_dump(mode='json')
    data['saved_at'] = datetime.now().isoformat()

    try:
        settings_file.parent.mkdir(parents=True, exist_ok=True)
        temp_file = settings_file.with_suffix('.tmp')
        with open(temp_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        temp_file.replace(settings_file)
    except OSError as e:
        raise SettingsError(f"Cannot save settings: {e}", settings_file) from e

    logger.info("Settings saved to %s", settings_file)
    return settings_file


def _migrate_settings(data: dict, from_version: int) -> dict:
    """Migrate settings data from older versions."""
    logger.info("Migrating settings from version %d to %d", from_version, SETTINGS_VERSION)
    data['version'] = SETTINGS_VERSION
    return data


__all__ = [
    'SettingsError',
    'LogLevel',
    'LoggingSettings',
    'ExportSettings',
    'DisplaySettings',
    'Settings',
    'SETTINGS_VERSION',
    'get_settings_dir',
    'get_settings_file',
    'load_settings',
    'save_settings',
]
