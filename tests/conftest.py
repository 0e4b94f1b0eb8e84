"""
Pytest configuration and fixtures for all tests.
"""

import os
import sys
import pytest

# Add src to Python path before any imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

# Set up test environment variables before importing any modules
os.environ.setdefault('ENVIRONMENT', 'test')
os.environ.setdefault('LOG_LEVEL', 'INFO')
os.environ.setdefault('SERVER_ADMIN', 'admin@example.com')
os.environ.setdefault('SERVER_NAME', 'example.com')
os.environ.setdefault('MAIL_REGION', 'us-east-1')
os.environ.setdefault('AWS_DEFAULT_REGION', 'us-east-1')


@pytest.fixture(autouse=True)
def reset_translations():
    """Restore identity translations after each test."""
    import gettext
    from webmisc.services import i18n
    yield
    i18n._translations = gettext.NullTranslations()
