"""
Artifact lifecycle management.

`ArtifactManager` installs, removes, lists and searches artifacts of one class
(packages or drivers). Everything class-specific lives in an `ArtifactClass`, so
packages and drivers share one implementation.
"""

import os
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from pkgmgr import files, transport
from pkgmgr.compatibility import HostProfile, current_host, is_compatible
from pkgmgr.constants import (
    DRIVER_DATABASE_URL_KEY,
    DRIVER_REGISTRY_FILE,
    DRIVERS_DIR_NAME,
    LABEL_COMPATIBLE,
    LABEL_NOT_COMPATIBLE,
    PACKAGE_DATABASE_URL_KEY,
    PACKAGE_REGISTRY_FILE,
    PACKAGES_DIR_NAME,
    REGISTRY_SEPARATOR,
    ZIP_EXTENSION,
)
from pkgmgr.exceptions import (
    AlreadyInstalledError,
    ArtifactNotFoundError,
    DownloadFailedError,
    ExtractionFailedError,
    IncompatibleArtifactError,
    InvalidNameError,
    InvalidVersionError,
    ManifestUnavailableError,
    NotInstalledError,
)
from pkgmgr.log_utils import logger
from pkgmgr.manifest import ArtifactRecord, load_manifest
from pkgmgr.registry import Registry
from pkgmgr.settings import Settings


@dataclass(frozen=True)
class ArtifactClass:
    """Metadata that distinguishes packages from drivers."""

    name: str
    """Singular lower-case name, e.g. 'package'"""

    folder: str
    """Install subfolder under the install root, e.g. 'packages'"""

    registry_file: str
    """Registry file name inside the install root"""

    url_key: str
    """Settings key holding the manifest URL"""

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def plural_label(self) -> str:
        return self.folder.capitalize()


PACKAGE = ArtifactClass(
    name="package",
    folder=PACKAGES_DIR_NAME,
    registry_file=PACKAGE_REGISTRY_FILE,
    url_key=PACKAGE_DATABASE_URL_KEY,
)
DRIVER = ArtifactClass(
    name="driver",
    folder=DRIVERS_DIR_NAME,
    registry_file=DRIVER_REGISTRY_FILE,
    url_key=DRIVER_DATABASE_URL_KEY,
)


@dataclass(frozen=True)
class SearchMatch:
    """A manifest record matching a search term, with its compatibility verdict."""

    record: ArtifactRecord
    compatible: bool

    @property
    def label(self) -> str:
        return LABEL_COMPATIBLE if self.compatible else LABEL_NOT_COMPATIBLE


class ArtifactManager:
    """
    Install, remove, list and search artifacts of one class.

    Collaborators are passed in explicitly; the defaults are the real HTTP
    transport, ZIP extraction and folder removal.

    Parameters:
        artifact_class: PACKAGE or DRIVER.
        settings: Loaded settings (manifest URL, install root).
        registry: Registry to use; defaults to the class's registry file in the install root.
        host: Host profile for compatibility checks; defaults to the running machine.
        fetch_text: `url -> text | None`.
        fetch_to_file: `(url, path) -> bool`.
        extract: `(archive, folder) -> bool`.
        delete_folder: `folder -> bool`, where a missing folder counts as success.
        report: Receives progress lines meant for the operator.
    """

    def __init__(
        self,
        artifact_class: ArtifactClass,
        settings: Settings,
        registry: Optional[Registry] = None,
        host: Optional[HostProfile] = None,
        fetch_text: Callable[[str], Optional[str]] = transport.fetch_text,
        fetch_to_file: Callable[[str, str], bool] = transport.fetch_to_file,
        extract: Callable[[str, str], bool] = files.extract_archive,
        delete_folder: Callable[[str], bool] = files.delete_folder,
        report: Callable[[str], None] = print,
    ) -> None:
        self.artifact_class = artifact_class
        self.settings = settings
        self.install_dir = os.path.join(settings.install_root, artifact_class.folder)
        if registry is None:
            registry = Registry(
                os.path.join(settings.install_root, artifact_class.registry_file)
            )
        self.registry = registry
        self.host = host or current_host()
        self._fetch_text = fetch_text
        self._fetch_to_file = fetch_to_file
        self._extract = extract
        self._delete_folder = delete_folder
        self._report = report

    def _checked_name(self, name: str) -> str:
        """Reject names that would resolve outside the install folder or break a registry line."""
        if (
            not name
            or name in (".", "..")
            or "/" in name
            or "\\" in name
            or "\x00" in name
            or REGISTRY_SEPARATOR in name
        ):
            raise InvalidNameError(name, self.artifact_class.label)
        return name

    def archive_path(self, name: str) -> str:
        return os.path.join(self.install_dir, self._checked_name(name) + ZIP_EXTENSION)

    def install_folder(self, name: str) -> str:
        return os.path.join(self.install_dir, self._checked_name(name))

    def fetch_manifest(self) -> Dict[str, ArtifactRecord]:
        """
        Fetch the remote manifest for this artifact class.

        Raises:
            ConfigurationError: If the manifest URL is not configured.
            ManifestUnavailableError: If the manifest could not be fetched.
        """
        url = self.settings.manifest_url(self.artifact_class.url_key)
        records = load_manifest(url, self._fetch_text)
        if records is None:
            raise ManifestUnavailableError(url, self.artifact_class.name)
        return records

    def install(self, name: str) -> ArtifactRecord:
        """
        Download, extract and register `name`.

        The registry is only updated once extraction has succeeded. If
        extraction fails, the partial install folder and the archive are removed.

        Returns:
            ArtifactRecord: The manifest record that was installed.

        Raises:
            AlreadyInstalledError, InvalidNameError, ManifestUnavailableError,
            ArtifactNotFoundError, IncompatibleArtifactError, InvalidVersionError,
            DownloadFailedError, ExtractionFailedError
        """
        label = self.artifact_class.label
        installed_version = self.registry.get(name)
        if installed_version is not None:
            raise AlreadyInstalledError(name, installed_version, label)

        archive = self.archive_path(name)
        folder = self.install_folder(name)

        record = self.fetch_manifest().get(name)
        if record is None:
            raise ArtifactNotFoundError(name, label)
        if not is_compatible(record, self.host):
            raise IncompatibleArtifactError(record, self.host, label)
        if REGISTRY_SEPARATOR in record.version:
            raise InvalidVersionError(name, record.version, label)

        self._report(
            f"Installing {self.artifact_class.name} '{name}' (version {record.version})."
        )
        if not self._fetch_to_file(record.download_url, archive):
            raise DownloadFailedError(record.download_url, label)

        if not self._extract(archive, folder):
            logger.error(f"Extraction of {archive} failed; cleaning up {folder}")
            self._delete_folder(folder)
            files.remove_file(archive)
            raise ExtractionFailedError(archive, label)
        self._report(f"Extraction completed to: {folder}")

        self.registry.set(name, record.version)
        self.registry.save()
        logger.info(
            f"Installed {self.artifact_class.name}: {name} (version {record.version})"
        )
        return record

    def remove(self, name: str) -> str:
        """
        Delete the install folder of `name` and drop it from the registry.

        A folder that is already gone, or a hand-edited entry whose name is not a
        valid folder name, does not stop the registry entry from being removed.

        Returns:
            str: The version that was installed.

        Raises:
            NotInstalledError: If the registry does not hold `name`.
        """
        version = self.registry.get(name)
        if version is None:
            raise NotInstalledError(name, self.artifact_class.label)

        try:
            folder = self.install_folder(name)
        except InvalidNameError:
            logger.warning(
                f"Registry entry '{name}' is not a valid folder name; "
                "dropping it without deleting anything"
            )
        else:
            if not self._delete_folder(folder):
                logger.warning(
                    f"Could not delete {folder}; removing '{name}' from the registry anyway"
                )

        self.registry.remove(name)
        self.registry.save()
        logger.info(f"Removed {self.artifact_class.name}: {name}")
        return version

    def list_installed(self) -> List[Tuple[str, str]]:
        """Return installed (name, version) pairs in install order."""
        return self.registry.items()

    def search(self, term: str) -> List[SearchMatch]:
        """
        Find manifest records whose name contains `term`, ignoring case.

        Returns:
            List[SearchMatch]: Matches in manifest order; empty when nothing matches.

        Raises:
            ManifestUnavailableError: If the manifest could not be fetched.
        """
        needle = term.lower()
        return [
            SearchMatch(record=record, compatible=is_compatible(record, self.host))
            for record in self.fetch_manifest().values()
            if needle in record.name.lower()
        ]
