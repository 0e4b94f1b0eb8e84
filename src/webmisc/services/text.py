"""
String helpers: HTML escaping, tag stripping, wrapping, hashes and avatars.
"""

import hashlib
import html
import re
import secrets
import textwrap
import time
from typing import Any
from urllib.parse import urlencode

# A tag opens with a letter, slash, ! or ?; an unterminated one runs to the end
# of the string. A bare "<" (e.g. "x < 10") is text.
_TAG_RE = re.compile(r'<[A-Za-z/!?][^>]*>?')
_LINE_BREAK_RE = re.compile(r'(\r\n|\r|\n)')

GRAVATAR_BASE_URL = 'https://www.gravatar.com/avatar/'
MAX_HASH_LENGTH = 128


def strip_tags(text: str) -> str:
    """Remove HTML tags from text."""
    return _TAG_RE.sub('', text)


def escape(text: str, strip: bool = False) -> str:
    """
    Escape text for safe inclusion in HTML.

    Args:
        text: Raw text
        strip: Remove tags instead of converting special characters

    Returns:
        str: Escaped (or tag-stripped) text

    Example:
        >>> escape('<a href="x">O\\'Neil</a>')
        '&lt;a href=&quot;x&quot;&gt;O&#x27;Neil&lt;/a&gt;'
    """
    if strip:
        return strip_tags(text)
    return html.escape(text, quote=True)


def wordwrap(text: str, width: int = 70) -> str:
    """
    Wrap lines longer than ``width`` at word boundaries.

    Existing line breaks are kept as they are (``\\n``, ``\\r\\n`` or ``\\r``)
    and new breaks use the first style found in the text. Words longer
    than ``width`` are never split.
    """
    first_break = _LINE_BREAK_RE.search(text)
    newline = first_break.group() if first_break else '\n'

    parts = _LINE_BREAK_RE.split(text)
    lines, breaks = parts[0::2], parts[1::2] + ['']

    wrapped = []
    for line, line_break in zip(lines, breaks):
        if len(line) > width:
            line = newline.join(textwrap.wrap(
                line,
                width=width,
                expand_tabs=False,
                replace_whitespace=False,
                break_long_words=False,
                break_on_hyphens=False,
            ))
        wrapped.append(line + line_break)
    return ''.join(wrapped)


def generate_hash(length: int = 80, client_ip: str = '') -> str:
    """
    Generate a random hexadecimal hash.

    Args:
        length: Number of characters to return (max 128)
        client_ip: Optional client address mixed into the seed

    Returns:
        str: Random hex string of ``min(length, 128)`` characters
    """
    if length < 0:
        raise ValueError("Hash length cannot be negative")

    seed = f"{client_ip}{secrets.token_hex(32)}{time.time_ns()}"
    inner = hashlib.sha512(seed.encode('utf-8')).hexdigest()
    outer = hashlib.sha512(f"{time.time()}{inner}".encode('utf-8')).hexdigest()
    return outer[:min(length, MAX_HASH_LENGTH)]


def gravatar_url(email: str, default: str = 'wavatar', size: int = 80, rating: str = 'g') -> str:
    """
    Build the Gravatar image URL for an email address.

    Args:
        email: User email address
        default: Image type shown when the address has no avatar
        size: Image size in pixels
        rating: Maximum rating allowed (g, pg, r, x)

    Returns:
        str: Avatar URL (escape it before embedding in HTML)
    """
    digest = hashlib.md5(email.strip().lower().encode('utf-8')).hexdigest()
    query = urlencode({'d': default, 's': size, 'r': rating})
    return f"{GRAVATAR_BASE_URL}{digest}?{query}"


def ifsetor(value: Any, default: Any = '') -> Any:
    """Return ``value`` unless it is None, otherwise ``default``."""
    return value if value is not None else default
