# src/pkgmgr/transport.py
import importlib.metadata
import os
import time
from typing import Optional

import requests

from pkgmgr.constants import APP_NAME, DEFAULT_CHUNK_SIZE, DEFAULT_REQUEST_TIMEOUT
from pkgmgr.log_utils import logger

# Cache for the User-Agent string to avoid repeated metadata lookups
_USER_AGENT_CACHE = None


def get_user_agent() -> str:
    """
    Get the User-Agent string used for HTTP requests.

    Returns:
        The string `pkgmgr/{version}`, where `{version}` is the installed package version or `unknown` if the version cannot be determined.
    """
    global _USER_AGENT_CACHE

    if _USER_AGENT_CACHE is None:
        try:
            app_version = importlib.metadata.version(APP_NAME)
        except importlib.metadata.PackageNotFoundError:
            app_version = "unknown"

        _USER_AGENT_CACHE = f"{APP_NAME}/{app_version}"

    return _USER_AGENT_CACHE


def _new_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": get_user_agent()})
    return session


def fetch_text(url: str, timeout: float = DEFAULT_REQUEST_TIMEOUT) -> Optional[str]:
    """
    Fetch a text document over HTTP.

    No retries are attempted; a request that does not answer within `timeout`
    seconds is treated as a failure.

    Parameters:
        url (str): The HTTP(S) URL of the document.
        timeout (float): Connect/read timeout in seconds.

    Returns:
        Optional[str]: The response body, or `None` if the URL is empty or the request failed.
    """
    if not url:
        logger.error("No URL given for text download")
        return None

    session = _new_session()
    try:
        logger.debug(f"Fetching text from URL: {url}")
        response = session.get(url, timeout=timeout)
        logger.debug(
            f"Received HTTP response status code: {response.status_code} for URL: {url}"
        )
        response.raise_for_status()
        if response.encoding is None:
            response.encoding = "utf-8"
        return response.text
    except requests.exceptions.RequestException as e_req:
        logger.error(f"DownloadText failed from {url}: {e_req}")
        return None
    finally:
        session.close()


def fetch_to_file(
    url: str, destination_path: str, timeout: float = DEFAULT_REQUEST_TIMEOUT
) -> bool:
    """
    Download a remote file to disk.

    Streams the URL to a temporary file next to the destination and atomically
    replaces the destination once the transfer completes. Parent directories are
    created as needed; the temporary file is removed on failure.

    Parameters:
        url (str): The HTTP(S) URL of the remote file to download.
        destination_path (str): Final filesystem path of the downloaded file.
        timeout (float): Connect/read timeout in seconds.

    Returns:
        bool: `True` if the file was downloaded and moved into place, `False` otherwise.
    """
    if not url:
        logger.error(f"No URL given for download to {destination_path}")
        return False

    print(f"Downloading from: {url}")
    temp_path = f"{destination_path}.tmp.{os.getpid()}.{int(time.time() * 1000)}"
    session = _new_session()
    response = None
    try:
        parent_dir = os.path.dirname(destination_path)
        if parent_dir:
            os.makedirs(parent_dir, exist_ok=True)

        start_time = time.time()
        response = session.get(url, stream=True, timeout=timeout)
        logger.debug(
            f"Received HTTP response status code: {response.status_code} for URL: {url}"
        )
        response.raise_for_status()

        downloaded_bytes = 0
        with open(temp_path, "wb") as file:
            for chunk in response.iter_content(chunk_size=DEFAULT_CHUNK_SIZE):
                if chunk:
                    file.write(chunk)
                    downloaded_bytes += len(chunk)

        os.replace(temp_path, destination_path)
        logger.debug(
            "Download elapsed time: %.2fs for %s", time.time() - start_time, url
        )
        logger.info(
            f"Downloaded file from {url} to {destination_path} ({downloaded_bytes} bytes)"
        )
        print(f"Download completed: {destination_path}")
        return True
    except requests.exceptions.RequestException as e_req:
        logger.error(f"Download failed from {url}: {e_req}")
        print(f"Download error: {e_req}")
    except OSError as e_io:
        logger.error(
            f"File I/O error during download of {url} (temp path: {temp_path}): {e_io}"
        )
        print(f"Download error: {e_io}")
    finally:
        if os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError as e_rm:
                logger.warning(
                    f"Error removing temporary file {temp_path} after failure: {e_rm}"
                )
        if response is not None:
            response.close()
        session.close()
    return False
