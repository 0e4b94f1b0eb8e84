"""
Packaged HTML templates (mail wrapper, default 404 page).
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# src/webmisc/services/templates.py -> src/webmisc/templates/
TEMPLATES_DIR = Path(__file__).parent.parent / 'templates'


def load_template(template_name: str) -> str:
    """
    Read a template shipped with the package.

    Args:
        template_name: Template file name (e.g., "mail.html")

    Raises:
        ValueError: If no such template is packaged
    """
    template_path = TEMPLATES_DIR / template_name
    try:
        return template_path.read_text(encoding='utf-8')
    except FileNotFoundError:
        logger.error(f"Template not found: {template_path}")
        raise ValueError(f"Unknown template: {template_name}")


def render(template: str, **variables) -> str:
    """
    Substitute ``{name}`` placeholders in a template.

    Substituted values are inserted verbatim; callers escape anything
    that must not be interpreted as HTML.

    Raises:
        ValueError: If a placeholder has no matching variable

    Example:
        >>> render("<title>{subject}</title>", subject="Hi")
        '<title>Hi</title>'
    """
    try:
        return template.format(**variables)
    except KeyError as e:
        raise ValueError(f"Template placeholder {e} has no value") from None
