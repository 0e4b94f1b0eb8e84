"""
Helper functions for web application code.

This package contains independent, stateless helpers grouped by concern:
validation, text, filesystem, web request/response, remote fetch,
translation, SQL scripts, templates and mail.
"""

__all__ = [
    'database', 'filesystem', 'i18n', 'mail', 'remote',
    'templates', 'text', 'validation', 'web',
]
