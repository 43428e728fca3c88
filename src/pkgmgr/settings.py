"""
Settings for pkgmgr.

Settings live in a plain `key = value` text file. When the file does not exist a
default one is written so the operator has something to edit.
"""

import os
from typing import Dict, Optional

import platformdirs

from pkgmgr.constants import (
    APP_NAME,
    DEFAULT_DRIVER_DATABASE_URL,
    DEFAULT_INSTALL_PATH_KEY,
    DEFAULT_PACKAGE_DATABASE_URL,
    DRIVER_DATABASE_URL_KEY,
    LOG_FILE_KEY,
    LOG_FILE_NAME,
    LOG_LEVEL_KEY,
    PACKAGE_DATABASE_URL_KEY,
    SETTINGS_ENV_VAR,
    SETTINGS_FILE_NAME,
)
from pkgmgr.exceptions import ConfigurationError, PersistenceError
from pkgmgr.files import atomic_write_lines
from pkgmgr.log_utils import logger

RECOGNIZED_KEYS = (
    PACKAGE_DATABASE_URL_KEY,
    DRIVER_DATABASE_URL_KEY,
    DEFAULT_INSTALL_PATH_KEY,
    LOG_FILE_KEY,
)


def get_settings_path() -> str:
    """
    Return the settings file location.

    The `PKGMGR_SETTINGS` environment variable wins; otherwise the file lives in
    the platformdirs-managed user config directory.
    """
    override = os.environ.get(SETTINGS_ENV_VAR)
    if override:
        return os.path.abspath(os.path.expanduser(override))
    return os.path.join(platformdirs.user_config_dir(APP_NAME), SETTINGS_FILE_NAME)


def default_settings() -> Dict[str, str]:
    """Build the settings written out on first run."""
    return {
        PACKAGE_DATABASE_URL_KEY: DEFAULT_PACKAGE_DATABASE_URL,
        DRIVER_DATABASE_URL_KEY: DEFAULT_DRIVER_DATABASE_URL,
        DEFAULT_INSTALL_PATH_KEY: platformdirs.user_data_dir(APP_NAME),
        LOG_FILE_KEY: os.path.join(platformdirs.user_log_dir(APP_NAME), LOG_FILE_NAME),
    }


def parse_settings(text: str) -> Dict[str, str]:
    """
    Parse `key = value` lines.

    Blank lines, `#` comments and lines without `=` are ignored. Only the first
    `=` separates key from value, so values may contain `=` themselves.
    """
    values: Dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if key:
            values[key] = value.strip()
    return values


class Settings:
    """
    Key/value settings backed by a text file.

    Instances are created explicitly and passed to the objects that need them.
    """

    def __init__(self, path: Optional[str] = None, values: Optional[Dict[str, str]] = None):
        self.path = path or get_settings_path()
        self._values: Dict[str, str] = dict(values) if values else {}

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Settings":
        """
        Load settings from disk, writing defaults when the file is missing.

        Read and write failures are logged and the in-memory defaults are used.
        """
        settings = cls(path)
        if not os.path.exists(settings.path):
            logger.info(f"Settings file {settings.path} not found; writing defaults")
            settings._values = default_settings()
            settings.save()
            return settings

        try:
            with open(settings.path, "r", encoding="utf-8-sig") as f:
                settings._values = parse_settings(f.read())
        except (OSError, UnicodeDecodeError) as e:
            error = PersistenceError(settings.path, str(e))
            logger.error(f"Error loading settings: {error}")
            settings._values = default_settings()
        return settings

    def save(self) -> bool:
        """Rewrite the settings file from memory; failures are logged."""
        lines = [f"{key} = {value}" for key, value in self._values.items()]
        if atomic_write_lines(self.path, lines):
            return True
        logger.error(f"Error saving settings: {PersistenceError(self.path)}")
        return False

    def get(self, key: str, default: str = "") -> str:
        return self._values.get(key, default)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def _resolve(self, value: str) -> str:
        path = os.path.expanduser(value)
        if not os.path.isabs(path):
            path = os.path.join(os.path.dirname(self.path), path)
        return os.path.normpath(path)

    @property
    def install_root(self) -> str:
        value = self.get(DEFAULT_INSTALL_PATH_KEY) or platformdirs.user_data_dir(
            APP_NAME
        )
        return self._resolve(value)

    @property
    def log_file(self) -> str:
        value = self.get(LOG_FILE_KEY) or os.path.join(
            platformdirs.user_log_dir(APP_NAME), LOG_FILE_NAME
        )
        return self._resolve(value)

    @property
    def log_level(self) -> Optional[str]:
        return self.get(LOG_LEVEL_KEY) or None

    def manifest_url(self, key: str) -> str:
        """
        Return the manifest URL stored under `key`.

        Raises:
            ConfigurationError: If the setting is missing or empty.
        """
        url = self.get(key)
        if not url:
            raise ConfigurationError(key)
        return url
