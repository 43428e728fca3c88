"""
Constants and configuration values for pkgmgr.

This module contains default URLs, file names, settings keys, timeouts, and
other constants used throughout the application.
"""

APP_NAME = "pkgmgr"

# Default remote manifests
DEFAULT_PACKAGE_DATABASE_URL = (
    "https://raw.githubusercontent.com/YourUsername/YourRepo/main/repo/packages.txt"
)
DEFAULT_DRIVER_DATABASE_URL = (
    "https://raw.githubusercontent.com/YourUsername/YourRepo/main/repo/drivers.txt"
)

# Network timeouts (in seconds)
DEFAULT_REQUEST_TIMEOUT = 15
DEFAULT_CHUNK_SIZE = 8192

# Settings file and recognized keys
SETTINGS_FILE_NAME = "settings.txt"
SETTINGS_ENV_VAR = "PKGMGR_SETTINGS"
PACKAGE_DATABASE_URL_KEY = "packageDatabaseUrl"
DRIVER_DATABASE_URL_KEY = "driverDatabaseUrl"
DEFAULT_INSTALL_PATH_KEY = "defaultInstallPath"
LOG_FILE_KEY = "logFile"
LOG_LEVEL_KEY = "logLevel"

# File and directory names
LOG_FILE_NAME = "pkgmgr.log"
PACKAGES_DIR_NAME = "packages"
DRIVERS_DIR_NAME = "drivers"
PACKAGE_REGISTRY_FILE = "installedPackages.txt"
DRIVER_REGISTRY_FILE = "installedDrivers.txt"
ZIP_EXTENSION = ".zip"

# Manifest records
MANIFEST_FIELD_COUNT = 5
DEFAULT_MIN_OS_VERSION = "0.0"
ARCH_X86 = "x86"
ARCH_X64 = "x64"
DEFAULT_ARCHITECTURE = ARCH_X86

# Registry file format
REGISTRY_SEPARATOR = ":"

# Search labels
LABEL_COMPATIBLE = "Compatible"
LABEL_NOT_COMPATIBLE = "Not compatible"

# Logging configuration
LOGGER_NAME = "pkgmgr"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
INFO_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s: %(message)s"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_FILE_BACKUP_COUNT = 5

# Environment variable names
LOG_LEVEL_ENV_VAR = "PKGMGR_LOG_LEVEL"
DISABLE_FILE_LOGGING_ENV_VAR = "PKGMGR_DISABLE_FILE_LOGGING"
DEFAULT_CONSOLE_LOG_LEVEL = "WARNING"

# User-facing messages
MSG_UNEXPECTED_ERROR = "An unexpected error occurred. See log for details."
