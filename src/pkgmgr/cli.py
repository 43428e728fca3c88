# src/pkgmgr/cli.py

import argparse
import sys
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from pkgmgr import log_utils
from pkgmgr.constants import (
    DEFAULT_INSTALL_PATH_KEY,
    DRIVER_DATABASE_URL_KEY,
    LOG_FILE_KEY,
    MSG_UNEXPECTED_ERROR,
    PACKAGE_DATABASE_URL_KEY,
)
from pkgmgr.exceptions import (
    AlreadyInstalledError,
    ArtifactNotFoundError,
    IncompatibleArtifactError,
    InvalidNameError,
    InvalidVersionError,
    NotInstalledError,
    PkgMgrError,
)
from pkgmgr.log_utils import logger
from pkgmgr.manager import DRIVER, PACKAGE, ArtifactClass, ArtifactManager
from pkgmgr.settings import RECOGNIZED_KEYS, Settings

COMMANDS = ("install", "list", "search", "remove")
HELP_WORDS = ("help", "-h", "--help")

# Commands that need a name or term, keyed by (command, is_driver)
MISSING_ARGUMENT_MESSAGES = {
    ("install", False): "Error: Please specify a package to install.",
    ("install", True): "Error: Please specify a driver to install.",
    ("search", False): "Error: Please specify a search term.",
    ("search", True): "Error: Please specify a search term for drivers.",
    ("remove", False): "Error: Please specify an item to remove.",
    ("remove", True): "Error: Please specify a driver to remove.",
}

# Outcomes that are reported to the operator but are not faults of the tool
REPORTED_OUTCOMES = (
    AlreadyInstalledError,
    NotInstalledError,
    ArtifactNotFoundError,
    IncompatibleArtifactError,
    InvalidNameError,
    InvalidVersionError,
)

SETTING_HINTS = {
    PACKAGE_DATABASE_URL_KEY: "<URL to remote packages.txt>",
    DRIVER_DATABASE_URL_KEY: "<URL to remote drivers.txt>",
    DEFAULT_INSTALL_PATH_KEY: "<local install directory>",
    LOG_FILE_KEY: "<path of the log file>",
}


@dataclass(frozen=True)
class ParsedCommand:
    """A validated command line: what to do, to which artifact class, and on what."""

    command: str
    artifact_class: ArtifactClass
    target: Optional[str] = None


def usage_text(settings_path: Optional[str] = None) -> str:
    lines = [
        "Usage: pkgmgr <command> [-d] [name or search term]",
        "Commands:",
        "  install [-d] <name>       Download, extract, and install an item from the remote database",
        "  list [-d]                 List locally installed items",
        "  search [-d] <term>        Search the remote database for items matching the term",
        "  remove [-d] <name>        Uninstall a locally installed item",
        "",
        "  -d                        Operate on drivers instead of packages",
        "",
        f"Settings in {settings_path or 'settings.txt'} must include:",
    ]
    lines.extend(f"  {key} = {SETTING_HINTS[key]}" for key in RECOGNIZED_KEYS)
    return "\n".join(lines)


def show_usage(settings_path: Optional[str] = None) -> None:
    print(usage_text(settings_path))


def _build_argument_parser() -> argparse.ArgumentParser:
    """Parser for everything after the command word."""
    parser = argparse.ArgumentParser(prog="pkgmgr", add_help=False)
    parser.add_argument(
        "-d",
        "-D",
        dest="driver",
        action="store_true",
        help="Operate on drivers instead of packages",
    )
    parser.add_argument("target", nargs="?", help="Name or search term")
    return parser


def parse_command(
    argv: Sequence[str], settings_path: Optional[str] = None
) -> Optional[ParsedCommand]:
    """
    Turn `command [-d] [name-or-term]` into a ParsedCommand.

    Unknown commands print the usage text; a missing name or term prints a
    specific "please specify" message. In both cases nothing is dispatched and
    `None` is returned. Arguments beyond the name or term are ignored.

    Parameters:
        argv: Command-line arguments without the program name.
        settings_path: Settings file location shown in the usage text.

    Returns:
        Optional[ParsedCommand]: The parsed command, or `None` if the command line was not usable.
    """
    if not argv:
        show_usage(settings_path)
        return None

    command = argv[0].lower()
    if command not in COMMANDS:
        show_usage(settings_path)
        return None

    args, extras = _build_argument_parser().parse_known_args(list(argv[1:]))
    if extras:
        logger.debug(f"Ignoring extra arguments: {' '.join(extras)}")

    artifact_class = DRIVER if args.driver else PACKAGE
    if args.target is None and command != "list":
        print(MISSING_ARGUMENT_MESSAGES[(command, args.driver)])
        return None

    return ParsedCommand(
        command=command, artifact_class=artifact_class, target=args.target
    )


def _run_install(manager: ArtifactManager, name: str) -> None:
    record = manager.install(name)
    print(
        f"{manager.artifact_class.label} '{name}' installed (version {record.version})."
    )


def _run_remove(manager: ArtifactManager, name: str) -> None:
    manager.remove(name)
    print(f"{manager.artifact_class.label} '{name}' removed.")


def _run_list(manager: ArtifactManager) -> None:
    print(f"Installed {manager.artifact_class.plural_label}:")
    installed = manager.list_installed()
    if not installed:
        print("  (none)")
        return
    for name, version in installed:
        print(f"  {name} (version {version})")


def _run_search(manager: ArtifactManager, term: str) -> None:
    matches = manager.search(term)
    print(
        f"Search results in {manager.artifact_class.plural_label} for term '{term}':"
    )
    if not matches:
        print(f"  No {manager.artifact_class.folder} found matching '{term}'.")
        return
    for match in matches:
        record = match.record
        print(
            f"  {record.name} (version {record.version}) - Download: "
            f"{record.download_url} [{match.label}]"
        )


def run_command(
    parsed: ParsedCommand,
    settings: Settings,
    manager_factory: Callable[..., ArtifactManager] = ArtifactManager,
) -> None:
    """
    Dispatch a parsed command to an ArtifactManager for its artifact class.

    Raises:
        PkgMgrError: Whatever the manager raises; main() reports it.
    """
    manager = manager_factory(parsed.artifact_class, settings)
    if parsed.command == "install":
        _run_install(manager, parsed.target)
    elif parsed.command == "remove":
        _run_remove(manager, parsed.target)
    elif parsed.command == "list":
        _run_list(manager)
    elif parsed.command == "search":
        _run_search(manager, parsed.target)


def _configure_logging(settings: Settings) -> None:
    """Apply the optional logLevel setting and attach the log file."""
    if settings.log_level:
        log_utils.set_log_level(settings.log_level)
    log_utils.add_file_logging(settings.log_file, settings.log_level or "INFO")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the pkgmgr command-line interface.

    Loads settings (writing defaults on first run), enables file logging, parses
    `command [-d] [name-or-term]` and runs it. Every failure is caught here,
    printed as a specific sentence and logged; unexpected errors print a
    generic message that points at the log.

    Returns:
        int: 0 on success, 1 if the command line was unusable or the command failed.
    """
    args = sys.argv[1:] if argv is None else argv

    if args and args[0].lower() in HELP_WORDS:
        show_usage()
        return 0

    parsed = None
    try:
        settings = Settings.load()
        _configure_logging(settings)

        parsed = parse_command(args, settings.path)
        if parsed is None:
            return 1

        run_command(parsed, settings)
        return 0
    except REPORTED_OUTCOMES as e:
        print(e.message)
        logger.info(f"{parsed.command if parsed else 'command'}: {e}")
        return 1
    except PkgMgrError as e:
        print(e.message)
        logger.error(f"{parsed.command if parsed else 'command'} failed: {e}")
        return 1
    except Exception as e:  # noqa: BLE001 - outermost boundary
        logger.exception(f"Error in command processing: {e}")
        print(MSG_UNEXPECTED_ERROR)
        return 1


if __name__ == "__main__":
    sys.exit(main())
