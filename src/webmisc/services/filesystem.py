"""
Filesystem helpers.

Most helpers report failure as a boolean (or empty result) and log the
underlying OSError instead of raising it.
"""

import base64
import importlib.util
import logging
import os
import sys
import zipfile
from pathlib import Path
from types import ModuleType
from typing import Dict, List, Optional

from webmisc.services.text import escape

logger = logging.getLogger(__name__)

DATA_URI_MIME_TYPES = {
    'gif': 'image/gif',
    'jpg': 'image/jpg',
    'png': 'image/png',
    'ico': 'image/x-icon',
    'eot': 'application/vnd.ms-fontobject',
    'otf': 'application/octet-stream',
    'ttf': 'application/octet-stream',
    'woff': 'application/octet-stream',
}

# Modules loaded by import_file(), keyed by resolved path
_imported: Dict[str, ModuleType] = {}


def get_dir_list(directory: str) -> List[str]:
    """
    List the sub-directories of a directory.

    Args:
        directory: Directory to scan

    Returns:
        List[str]: Sorted sub-directory names (empty if unreadable)
    """
    try:
        with os.scandir(directory) as entries:
            names = [entry.name for entry in entries if entry.is_dir()]
    except OSError as e:
        logger.warning(f"Cannot list directory {directory}: {e}")
        return []
    return sorted(names)


def ensure_leading_slash(path: str) -> str:
    """Prefix ``path`` with '/' unless it already starts with one."""
    return path if path.startswith('/') else '/' + path


def ensure_trailing_slash(path: str) -> str:
    """Suffix ``path`` with '/' unless it already ends with one."""
    return path if path.endswith('/') else path + '/'


def normalize_dir_path(path: str) -> str:
    """Trim whitespace and ensure leading and trailing slashes."""
    return ensure_leading_slash(ensure_trailing_slash(path.strip()))


def is_directory(path: str) -> bool:
    """Check the (normalized) path is an existing, writable directory."""
    normalized = normalize_dir_path(path)
    return os.path.isdir(normalized) and os.access(normalized, os.W_OK)


def delete_dir(path: str) -> bool:
    """
    Delete a file, or a directory and everything below it.

    Every entry is attempted even after a failure; nothing is rolled
    back, so a failed call can leave a partially deleted tree.

    Args:
        path: File or directory to delete

    Returns:
        bool: True if the path no longer exists because of this call,
            False if it did not exist or anything could not be removed
    """
    if os.path.islink(path) or os.path.isfile(path):
        try:
            os.unlink(path)
            return True
        except OSError as e:
            logger.warning(f"Cannot delete file {path}: {e}")
            return False

    if not os.path.isdir(path):
        return False

    try:
        with os.scandir(path) as entries:
            children = [entry.path for entry in entries]
    except OSError as e:
        logger.warning(f"Cannot list directory {path}: {e}")
        return False

    for child in children:
        delete_dir(child)

    try:
        os.rmdir(path)
        return True
    except OSError as e:
        logger.warning(f"Cannot delete directory {path}: {e}")
        return False


def is_url_rewrite(directory: str, filename: str = '.htaccess') -> bool:
    """Check the URL rewrite file exists in ``directory``."""
    return os.path.isfile(os.path.join(directory, filename))


def is_windows() -> bool:
    """Check if the OS is Windows."""
    return sys.platform.startswith('win')


def zip_extract(archive: str, directory: str) -> bool:
    """
    Extract a zip archive into a directory.

    Returns:
        bool: True if the archive was opened and extracted
    """
    try:
        with zipfile.ZipFile(archive) as zf:
            zf.extractall(directory)
    except (zipfile.BadZipFile, OSError) as e:
        logger.warning(f"Cannot extract {archive} to {directory}: {e}")
        return False

    logger.info(f"Extracted {archive} to {directory}")
    return True


def import_file(path: str) -> ModuleType:
    """
    Execute a Python file once and return it as a module.

    Later calls with the same file return the already-loaded module.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    resolved = Path(path).resolve()
    if not resolved.is_file():
        raise FileNotFoundError(f'The "{escape(path)}" file is not found!')

    key = str(resolved)
    if key in _imported:
        return _imported[key]

    spec = importlib.util.spec_from_file_location(resolved.stem, key)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    _imported[key] = module
    logger.debug(f"Imported {key}")
    return module


def base64_data_uri(path: str) -> Optional[str]:
    """
    Encode a file as a ``data:`` URI.

    Supported extensions: gif, jpg, png, ico, eot, otf, ttf, woff.

    Returns:
        Optional[str]: ``data:<mime>;base64,<data>``, or None for an
            unsupported file type
    """
    extension = Path(path).suffix.lower().lstrip('.')
    mime_type = DATA_URI_MIME_TYPES.get(extension)
    if mime_type is None:
        logger.warning(f"The file format is not supported: {path}")
        return None

    with open(path, 'rb') as f:
        encoded = base64.b64encode(f.read()).decode('ascii')

    return f"data:{mime_type};base64,{encoded}"
