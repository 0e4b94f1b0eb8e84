"""
Runtime configuration read from environment variables.

Values are resolved once at import time. Modules read them through this
module (``config.SERVER_ADMIN``) so tests can patch a single place.
"""

import os
from pathlib import Path

ENVIRONMENT = os.environ.get('ENVIRONMENT', 'dev')
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

# Server identity used as the envelope sender of outgoing mail
SERVER_ADMIN = os.environ.get('SERVER_ADMIN', 'webmaster@localhost')
SERVER_NAME = os.environ.get('SERVER_NAME', 'localhost')

# Amazon SES transport
MAIL_REGION = os.environ.get('MAIL_REGION', 'us-east-1')
MAIL_CONNECT_TIMEOUT = int(os.environ.get('MAIL_CONNECT_TIMEOUT', '10'))
MAIL_READ_TIMEOUT = int(os.environ.get('MAIL_READ_TIMEOUT', '30'))

# Outbound HTTP requests (seconds)
REMOTE_TIMEOUT = float(os.environ.get('REMOTE_TIMEOUT', '10'))

# HTTP Basic credentials protecting /admin routes
ADMIN_USER = os.environ.get('ADMIN_USER', '')
ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', '')

# gettext catalogs
LOCALE_DIR = os.environ.get('LOCALE_DIR', str(Path(__file__).parent / 'locale'))
LOCALE_DOMAIN = os.environ.get('LOCALE_DOMAIN', 'messages')
