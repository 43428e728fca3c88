import sys
from pathlib import Path

import platformdirs
import pytest
import requests

# Add src to path so the package imports without installation
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

_NETWORK_BLOCK_MSG = (
    "Network access is blocked during tests. Mock requests.* or Session.request."
)


def _block_network(*_args, **_kwargs):
    """
    Prevent network calls in tests by raising a RuntimeError.

    Raises:
        RuntimeError: with `_NETWORK_BLOCK_MSG` indicating that network access is blocked during tests.
    """
    raise RuntimeError(_NETWORK_BLOCK_MSG)


def pytest_configure(config):
    """Register the markers used to group the test suite."""
    for marker in (
        "unit: fast tests without filesystem side effects outside tmp_path",
        "integration: tests that combine several modules",
        "core_downloads: tests for transport and artifact installation",
        "user_interface: tests for command-line output",
        "configuration: tests for the settings file",
    ):
        config.addinivalue_line("markers", marker)


@pytest.fixture(autouse=True)
def _isolate_test_environment(tmp_path_factory, monkeypatch):
    """
    Create an isolated config/data/log layout and point pkgmgr at it.

    Sets PKGMGR_SETTINGS to a settings file inside the temp tree, disables file
    logging, clears PKGMGR_LOG_LEVEL and patches the platformdirs user_* functions
    so defaults never land in the real home directory.
    """
    base = tmp_path_factory.mktemp("pkgmgr")
    config_dir = base / "config"
    data_dir = base / "data"
    log_dir = base / "log"

    for path in (config_dir, data_dir, log_dir):
        path.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("PKGMGR_SETTINGS", str(config_dir / "settings.txt"))
    monkeypatch.setenv("PKGMGR_DISABLE_FILE_LOGGING", "1")
    monkeypatch.delenv("PKGMGR_LOG_LEVEL", raising=False)

    monkeypatch.setattr(
        platformdirs, "user_config_dir", lambda *_args, **_kwargs: str(config_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_data_dir", lambda *_args, **_kwargs: str(data_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_log_dir", lambda *_args, **_kwargs: str(log_dir)
    )


@pytest.fixture(autouse=True)
def _block_requests(monkeypatch):
    """Replace the requests entry points with a blocker for the duration of each test."""
    for name in ("get", "post", "put", "delete", "head", "patch", "options"):
        monkeypatch.setattr(requests, name, _block_network)
    monkeypatch.setattr(requests.Session, "request", _block_network)


@pytest.fixture
def settings_file(tmp_path, monkeypatch):
    """
    Write a settings file pointing at a temp install root and test manifest URLs.

    Returns:
        Path: The settings file; its install root is `tmp_path / "install"`.
    """
    path = tmp_path / "settings.txt"
    path.write_text(
        "packageDatabaseUrl = https://example.com/packages.txt\n"
        "driverDatabaseUrl = https://example.com/drivers.txt\n"
        f"defaultInstallPath = {tmp_path / 'install'}\n"
        f"logFile = {tmp_path / 'pkgmgr.log'}\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("PKGMGR_SETTINGS", str(path))
    return path


@pytest.fixture
def make_zip(tmp_path):
    """
    Build ZIP archives for tests.

    Returns:
        Callable[[str, dict], Path]: Factory taking an archive name and a mapping of member path to content.
    """
    import zipfile

    def _make(name, members):
        zip_path = tmp_path / name
        with zipfile.ZipFile(zip_path, "w") as zf:
            for member, content in members.items():
                zf.writestr(member, content)
        return zip_path

    return _make
