"""
Custom exceptions for pkgmgr.

Each exception carries the user-facing sentence that the command line prints
when the failure reaches the top-level dispatch, so every failure path reports
something specific instead of a generic error.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pkgmgr.compatibility import HostProfile
    from pkgmgr.manifest import ArtifactRecord


class PkgMgrError(Exception):
    """
    Base exception for all pkgmgr errors.

    All custom exceptions in pkgmgr inherit from this class so the command
    dispatch can catch application failures in one place.
    """

    def __init__(self, message: str, details: str | None = None) -> None:
        """
        Initialize the exception.

        Args:
            message: The primary, user-facing error message.
            details: Optional additional context about the error.
        """
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(PkgMgrError):
    """Exception raised when a required setting is missing or empty."""

    def __init__(self, key: str, details: str | None = None) -> None:
        super().__init__(
            f"Setting '{key}' is not configured. Please set it in the settings file.",
            details,
        )
        self.key = key


class PersistenceError(PkgMgrError):
    """
    Exception raised when the registry or the settings file cannot be read or written.

    These failures are logged and the operation continues with in-memory state,
    so this exception is mostly used to carry the message to the log.
    """

    def __init__(self, path: str, details: str | None = None) -> None:
        super().__init__(f"Could not persist state to '{path}'.", details)
        self.path = path


# =============================================================================
# Manifest Errors
# =============================================================================


class ManifestUnavailableError(PkgMgrError):
    """
    Exception raised when the remote manifest could not be fetched.

    This is distinct from a manifest that was fetched but lists nothing.
    """

    def __init__(self, url: str, label: str = "package") -> None:
        super().__init__(f"Could not retrieve the remote {label} database.", url)
        self.url = url
        self.label = label


class ArtifactNotFoundError(PkgMgrError):
    """Exception raised when a name is absent from the remote manifest."""

    def __init__(self, name: str, label: str = "Package") -> None:
        super().__init__(f"{label} '{name}' not found in remote database.")
        self.name = name


class IncompatibleArtifactError(PkgMgrError):
    """
    Exception raised when a record does not match the host architecture or OS version.

    Attributes:
        record: The manifest record that was rejected.
        host: The host profile it was checked against.
    """

    def __init__(
        self,
        record: "ArtifactRecord",
        host: "HostProfile",
        label: str = "Package",
    ) -> None:
        super().__init__(
            f"{label} '{record.name}' requires {record.architecture} and OS "
            f"{record.min_os_version} or later. Your system: "
            f"{host.architecture}, OS {host.os_version}."
        )
        self.record = record
        self.host = host


# =============================================================================
# Lifecycle Errors
# =============================================================================


class InvalidNameError(PkgMgrError):
    """Exception raised when a name cannot be used as an install folder name."""

    def __init__(self, name: str, label: str = "Package") -> None:
        super().__init__(f"'{name}' is not a valid {label.lower()} name.")
        self.name = name


class InvalidVersionError(PkgMgrError):
    """Exception raised when a manifest version cannot be stored in the registry."""

    def __init__(self, name: str, version: str, label: str = "Package") -> None:
        super().__init__(
            f"{label} '{name}' has a version that cannot be recorded: '{version}'."
        )
        self.name = name
        self.version = version


class AlreadyInstalledError(PkgMgrError):
    """Exception raised when installing a name the registry already holds."""

    def __init__(self, name: str, version: str, label: str = "Package") -> None:
        super().__init__(f"{label} '{name}' is already installed (version {version}).")
        self.name = name
        self.version = version


class NotInstalledError(PkgMgrError):
    """Exception raised when removing a name the registry does not hold."""

    def __init__(self, name: str, label: str = "Package") -> None:
        super().__init__(f"{label} '{name}' is not installed.")
        self.name = name


class DownloadFailedError(PkgMgrError):
    """
    Exception raised when an artifact could not be downloaded.

    Attributes:
        url: The URL that was being downloaded when the error occurred.
    """

    def __init__(self, url: str, label: str = "Package") -> None:
        super().__init__(f"{label} download failed.", url)
        self.url = url


class ExtractionFailedError(PkgMgrError):
    """
    Exception raised when a downloaded archive could not be extracted.

    Attributes:
        archive: Path of the archive that failed to extract.
    """

    def __init__(self, archive: str, label: str = "Package") -> None:
        super().__init__(
            f"{label} archive could not be extracted; nothing was installed.",
            archive,
        )
        self.archive = archive
