"""
Remote manifest parsing.

A manifest lists one artifact per line:

    <architecture> <minOSVersion> <name> <version> <downloadURL...>

Fields are separated by single spaces. Everything from the fifth field onward is
joined back together with single spaces to form the download location.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from pkgmgr.constants import (
    DEFAULT_ARCHITECTURE,
    DEFAULT_MIN_OS_VERSION,
    MANIFEST_FIELD_COUNT,
)
from pkgmgr.log_utils import logger


@dataclass(frozen=True)
class ArtifactRecord:
    """One installable artifact as listed in a remote manifest."""

    name: str
    """Unique key within one manifest"""

    version: str
    """Opaque version string, compared for equality and display only"""

    download_url: str
    """Where the artifact archive is downloaded from"""

    min_os_version: str = DEFAULT_MIN_OS_VERSION
    """Dotted minimum OS version, e.g. '5.1'"""

    architecture: str = DEFAULT_ARCHITECTURE
    """Required architecture, 'x86' or 'x64'"""


def parse_record(line: str) -> Optional[ArtifactRecord]:
    """
    Parse one manifest line.

    Returns:
        Optional[ArtifactRecord]: The record, or `None` for blank lines and lines with fewer than five fields.
    """
    trimmed = line.strip()
    if not trimmed:
        return None

    parts = trimmed.split()
    if len(parts) < MANIFEST_FIELD_COUNT:
        return None

    architecture, min_os, name, version = parts[:4]
    return ArtifactRecord(
        name=name,
        version=version,
        download_url=" ".join(parts[4:]),
        min_os_version=min_os,
        architecture=architecture,
    )


def parse_manifest(text: str) -> Dict[str, ArtifactRecord]:
    """
    Parse manifest text into a mapping of artifact name to record.

    Malformed lines are skipped without affecting their neighbours, and a later
    line with the same name replaces an earlier one.

    Parameters:
        text (str): Raw manifest body.

    Returns:
        Dict[str, ArtifactRecord]: Records keyed by name; empty when nothing well-formed was found.
    """
    records: Dict[str, ArtifactRecord] = {}
    skipped = 0
    for line in text.splitlines():
        record = parse_record(line)
        if record is None:
            if line.strip():
                skipped += 1
            continue
        records[record.name] = record

    if skipped:
        logger.debug(f"Skipped {skipped} malformed manifest line(s)")
    return records


def load_manifest(
    url: str, fetch_text: Callable[[str], Optional[str]]
) -> Optional[Dict[str, ArtifactRecord]]:
    """
    Fetch and parse the manifest at `url`.

    Returns:
        Optional[Dict[str, ArtifactRecord]]: `None` when the fetch failed, otherwise the parsed mapping (possibly empty).
    """
    text = fetch_text(url)
    if text is None:
        return None
    records = parse_manifest(text)
    logger.debug(f"Loaded {len(records)} record(s) from {url}")
    return records
