"""
Host compatibility checks.

A record is compatible when its required architecture equals the host's and the
host OS version is at least the record's minimum OS version.

A minimum OS version that cannot be parsed is treated as compatible on purpose:
a typo in the manifest should not block installs. The same applies when the
host's own version cannot be determined.
"""

import platform
import re
import struct
from dataclasses import dataclass
from typing import Optional

from packaging.version import InvalidVersion, Version

from pkgmgr.constants import ARCH_X64, ARCH_X86
from pkgmgr.manifest import ArtifactRecord

_DOTTED_VERSION_RX = re.compile(r"^\s*(\d+(?:\.\d+)*)")
_STRICT_DOTTED_RX = re.compile(r"^\d+(?:\.\d+)*$")


@dataclass(frozen=True)
class HostProfile:
    """Architecture and OS version of the machine running pkgmgr."""

    architecture: str
    os_version: str


def current_architecture() -> str:
    """Return 'x64' on 64-bit interpreters (8-byte pointers), 'x86' otherwise."""
    return ARCH_X64 if struct.calcsize("P") == 8 else ARCH_X86


def current_os_version() -> str:
    """
    Return the dotted OS version of the running system.

    Windows reports e.g. '10.0.19045', macOS the product version, other systems
    the leading numeric part of the kernel release.
    """
    system = platform.system()
    if system == "Windows":
        raw = platform.version()
    elif system == "Darwin":
        raw = platform.mac_ver()[0] or platform.release()
    else:
        raw = platform.release()

    match = _DOTTED_VERSION_RX.match(raw or "")
    return match.group(1) if match else "0.0"


def current_host() -> HostProfile:
    return HostProfile(
        architecture=current_architecture(), os_version=current_os_version()
    )


def parse_dotted_version(value: str) -> Optional[Version]:
    """
    Parse a dotted-integer version such as '6.1' or '10.0.19045'.

    Returns:
        Optional[Version]: The parsed version, or `None` if `value` is not purely dotted integers.
    """
    value = (value or "").strip()
    if not _STRICT_DOTTED_RX.match(value):
        return None
    try:
        return Version(value)
    except InvalidVersion:
        return None


def is_compatible(record: ArtifactRecord, host: HostProfile) -> bool:
    """
    Decide whether `record` can be installed on `host`.

    Parameters:
        record (ArtifactRecord): Manifest record to check.
        host (HostProfile): Profile of the target machine.

    Returns:
        bool: `True` if the architecture matches (case-insensitively) and the host OS version is at least the minimum.
    """
    if record.architecture.strip().lower() != host.architecture.strip().lower():
        return False

    required = parse_dotted_version(record.min_os_version)
    if required is None:
        return True
    current = parse_dotted_version(host.os_version)
    if current is None:
        return True
    return current >= required
