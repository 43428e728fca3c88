"""
Local registry of installed artifacts.

One registry exists per artifact class. It is a UTF-8 text file with one
`name:version` line per installed artifact, loaded fully at construction and
rewritten in full after every change.
"""

import os
from typing import Dict, List, Optional, Tuple

from pkgmgr.constants import REGISTRY_SEPARATOR
from pkgmgr.exceptions import PersistenceError
from pkgmgr.files import atomic_write_lines
from pkgmgr.log_utils import logger


class Registry:
    """
    In-memory mapping of installed name to version, persisted to `path`.

    Insertion order is kept so listings show artifacts in install order.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._entries: Dict[str, str] = {}
        self.load()

    def load(self) -> None:
        """
        Read the registry file into memory.

        A missing file means an empty registry. Lines that do not split into
        exactly two parts on ':' are discarded. Read errors are logged and leave
        the registry empty.
        """
        self._entries = {}
        if not os.path.exists(self.path):
            return

        try:
            with open(self.path, "r", encoding="utf-8-sig") as f:
                lines = f.read().splitlines()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(
                f"Error loading registry: {PersistenceError(self.path, str(e))}"
            )
            return

        for line in lines:
            if not line:
                continue
            parts = line.split(REGISTRY_SEPARATOR)
            if len(parts) != 2:
                logger.debug(f"Discarding malformed registry line in {self.path}: {line!r}")
                continue
            self._entries[parts[0].strip()] = parts[1].strip()

    def save(self) -> bool:
        """
        Atomically rewrite the registry file from memory.

        Returns:
            bool: `True` if the file was written; `False` if it failed, in which case the in-memory state is kept and the failure is logged.
        """
        lines = [
            f"{name}{REGISTRY_SEPARATOR}{version}"
            for name, version in self._entries.items()
        ]
        if atomic_write_lines(self.path, lines):
            return True
        logger.error(f"Error saving registry: {PersistenceError(self.path)}")
        return False

    def contains(self, name: str) -> bool:
        return name in self._entries

    def get(self, name: str) -> Optional[str]:
        return self._entries.get(name)

    def set(self, name: str, version: str) -> None:
        """Add or overwrite an entry. Call save() afterwards to persist it."""
        self._entries[name] = version

    def remove(self, name: str) -> None:
        """Delete an entry if present; unknown names are ignored."""
        self._entries.pop(name, None)

    def items(self) -> List[Tuple[str, str]]:
        return list(self._entries.items())

    def as_dict(self) -> Dict[str, str]:
        return dict(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)
