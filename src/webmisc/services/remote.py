"""
Remote HTTP fetch helpers.

Every request carries an explicit timeout (REMOTE_TIMEOUT by default).
"""

import logging
from typing import Optional

import requests

from webmisc import config

logger = logging.getLogger(__name__)

# First response statuses accepted by check_url()
VALID_URL_STATUSES = (200, 301)


def get_file_contents(url: str, timeout: Optional[float] = None) -> Optional[str]:
    """
    Fetch the body of a URL, following redirects.

    Args:
        url: URL to fetch
        timeout: Seconds to wait for connect and read (default: REMOTE_TIMEOUT)

    Returns:
        Optional[str]: Response body, or None if the request failed
    """
    timeout = timeout if timeout is not None else config.REMOTE_TIMEOUT
    try:
        response = requests.get(url, timeout=timeout, allow_redirects=True)
    except requests.RequestException as e:
        logger.warning(f"Failed to fetch {url}: {e}")
        return None
    return response.text


def check_url(url: str, timeout: Optional[float] = None) -> bool:
    """
    Check a URL answers '200 OK' or '301 Moved Permanently'.

    Only the first response is considered; redirects are not followed.
    """
    timeout = timeout if timeout is not None else config.REMOTE_TIMEOUT
    try:
        response = requests.head(url, timeout=timeout, allow_redirects=False)
    except requests.RequestException as e:
        logger.info(f"URL check failed for {url}: {e}")
        return False
    return response.status_code in VALID_URL_STATUSES
