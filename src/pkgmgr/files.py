"""
File Operations for pkgmgr

This module provides the filesystem primitives the artifact manager relies on:
atomic text writes, ZIP extraction and recursive folder removal.
"""

import os
import shutil
import tempfile
import zipfile
from typing import Any, Callable, Iterable

from pkgmgr.log_utils import logger


def _is_within_base(real_base_dir: str, candidate: str) -> bool:
    """
    Determine whether the candidate path resides within the given base directory.

    Returns:
        True if the candidate path is inside `real_base_dir`, False otherwise.
    """
    try:
        return os.path.commonpath([real_base_dir, candidate]) == real_base_dir
    except ValueError:
        return False


def _is_safe_archive_member(member_name: str) -> bool:
    """
    Determine whether an archive member name is safe to extract.

    Returns:
        `True` if the member name contains no absolute paths, parent-directory references, or null bytes, `False` otherwise.
    """
    if not member_name or member_name.startswith("/") or member_name.startswith("\\"):
        return False
    if "\x00" in member_name:
        return False
    normalized = os.path.normpath(member_name)
    # Reject absolute paths (including Windows drive-letter paths)
    if os.path.isabs(normalized):
        return False
    if normalized == "..":
        return False
    if normalized.startswith(f"..{os.sep}"):
        return False
    if os.altsep and normalized.startswith(f"..{os.altsep}"):
        return False
    return True


def safe_extract_path(extract_dir: str, file_path: str) -> str:
    """
    Resolve a safe absolute extraction path and prevent directory traversal.

    Parameters:
        extract_dir (str): Base directory intended for extraction.
        file_path (str): Member path from the archive to be extracted.

    Returns:
        str: Absolute, normalized path inside extract_dir suitable for extraction.

    Raises:
        ValueError: If the resolved path is outside extract_dir.
    """
    real_extract_dir = os.path.realpath(extract_dir)
    prospective_path = os.path.join(real_extract_dir, file_path)
    normalized_path = os.path.realpath(prospective_path)

    if not _is_within_base(real_extract_dir, normalized_path):
        raise ValueError(
            f"Unsafe extraction path '{file_path}' is outside base '{extract_dir}'"
        )

    return normalized_path


def _atomic_write(
    file_path: str, writer_func: Callable[[Any], None], suffix: str = ".tmp"
) -> bool:
    """
    Write data to a file atomically by writing to a temporary file and atomically replacing the target on success.

    Parameters:
        file_path (str): Destination file path to be written.
        writer_func (Callable[[Any], None]): Callable that receives an open text file-like object and writes the desired content to it.
        suffix (str): Suffix to use for the temporary file name (default ".tmp").

    Returns:
        bool: `True` if the temporary write and atomic replace succeeded, `False` on any error.
    """
    target_dir = os.path.dirname(os.path.abspath(file_path))
    try:
        os.makedirs(target_dir, exist_ok=True)
        temp_fd, temp_path = tempfile.mkstemp(
            dir=target_dir, prefix="tmp-", suffix=suffix
        )
    except OSError as e:
        logger.error(f"Could not create temporary file for {file_path}: {e}")
        return False

    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8", newline="\n") as temp_f:
            writer_func(temp_f)
        os.replace(temp_path, file_path)
    except (UnicodeEncodeError, OSError) as e:
        logger.error(f"Could not write to {file_path}: {e}")
        return False
    finally:
        if os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError:
                pass
    return True


def atomic_write_lines(file_path: str, lines: Iterable[str]) -> bool:
    """
    Atomically replace `file_path` with the given lines, one per line, UTF-8 encoded.

    Returns:
        bool: `True` on success, `False` if the file could not be written.
    """

    def _write_lines(f):
        for line in lines:
            f.write(f"{line}\n")

    return _atomic_write(file_path, _write_lines, suffix=".txt")


def extract_archive(zip_path: str, extract_dir: str) -> bool:
    """
    Extract every regular file of a ZIP archive into `extract_dir`.

    Directory entries are skipped; folders are created from the member paths so
    the archive's relative layout is preserved. Members that would land outside
    `extract_dir` are skipped with a warning.

    Parameters:
        zip_path (str): Path to the ZIP archive.
        extract_dir (str): Destination directory, created if missing.

    Returns:
        bool: `True` if the archive was read and all safe members were written, `False` on error.
    """
    extracted = 0
    try:
        os.makedirs(extract_dir, exist_ok=True)
        with zipfile.ZipFile(zip_path, "r") as zip_ref:
            for file_info in zip_ref.infolist():
                if file_info.is_dir():
                    continue

                file_name = file_info.filename
                if not _is_safe_archive_member(file_name):
                    logger.warning(
                        "Skipping unsafe archive member %s (possible traversal)",
                        file_name,
                    )
                    continue

                try:
                    extract_path = safe_extract_path(extract_dir, file_name)
                except ValueError as e:
                    logger.warning(f"Skipping unsafe extraction path: {e}")
                    continue

                os.makedirs(os.path.dirname(extract_path), exist_ok=True)
                with (
                    zip_ref.open(file_info) as source,
                    open(extract_path, "wb") as target,
                ):
                    shutil.copyfileobj(source, target)
                extracted += 1
                logger.debug(f"Extracted {file_name} to {extract_path}")
    except (zipfile.BadZipFile, OSError) as e:
        logger.error(f"Error extracting ZIP {zip_path}: {e}")
        return False

    logger.info(f"Extracted ZIP {zip_path} to {extract_dir} ({extracted} files)")
    return True


def delete_folder(folder_path: str) -> bool:
    """
    Recursively delete a folder.

    A folder that does not exist is logged and treated as already removed.

    Returns:
        bool: `True` if the folder is gone afterwards, `False` if deletion failed.
    """
    if not os.path.isdir(folder_path):
        logger.info(f"Folder {folder_path} does not exist; nothing to delete")
        return True

    try:
        shutil.rmtree(folder_path)
    except OSError as e:
        logger.error(f"Error deleting folder {folder_path}: {e}")
        return False

    logger.info(f"Deleted folder {folder_path}")
    return True


def remove_file(file_path: str) -> bool:
    """Remove a single file if present; returns False only when removal fails."""
    try:
        if os.path.exists(file_path):
            os.remove(file_path)
        return True
    except OSError as e:
        logger.error(f"Error removing file {file_path}: {e}")
        return False
