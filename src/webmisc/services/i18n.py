"""
Translation helpers over gettext catalogs.

Placeholders are substituted before the catalog lookup, so catalog
entries are keyed by the substituted text.
"""

import gettext
import logging
from typing import Optional

from webmisc import config

logger = logging.getLogger(__name__)

# Identity translations until install() loads a catalog
_translations: gettext.NullTranslations = gettext.NullTranslations()


def install(
    language: str,
    domain: Optional[str] = None,
    localedir: Optional[str] = None
) -> gettext.NullTranslations:
    """
    Load the catalog for ``language`` used by tr() and nt().

    Falls back to identity translations when no catalog exists.

    Args:
        language: Language code (e.g. "fr")
        domain: Catalog domain (default: LOCALE_DOMAIN)
        localedir: Directory holding <lang>/LC_MESSAGES/<domain>.mo (default: LOCALE_DIR)

    Returns:
        The installed translations object
    """
    global _translations
    domain = domain or config.LOCALE_DOMAIN
    localedir = localedir or config.LOCALE_DIR

    _translations = gettext.translation(
        domain,
        localedir=localedir,
        languages=[language],
        fallback=True
    )
    if type(_translations) is gettext.NullTranslations:
        logger.info(f"No '{domain}' catalog for language '{language}' in {localedir}")
    return _translations


def tr(token: str, *args) -> str:
    """
    Translate a message, substituting ``%0%``, ``%1%``, ... with ``args``.

    Example:
        >>> tr("Hello %0%, you have %1% messages", "Ann", 3)
        'Hello Ann, you have 3 messages'
    """
    for index, value in enumerate(args):
        token = token.replace(f"%{index}%", str(value))
    return _translations.gettext(token)


def nt(singular: str, plural: str, number: int) -> str:
    """
    Plural-aware translation; ``%n%`` in either form becomes ``number``.

    Example:
        >>> nt("%n% file", "%n% files", 2)
        '2 files'
    """
    singular = singular.replace('%n%', str(number))
    plural = plural.replace('%n%', str(number))
    return _translations.ngettext(singular, plural, number)
