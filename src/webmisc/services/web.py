"""
Request and response helpers.

Request data is read from an explicit RequestContext. Helpers that would
end a request (redirect, 404, failed authentication) return an
HttpResponse for the caller to send instead.
"""

import hmac
import logging
import os
import re
from typing import Optional

from webmisc.domain.models import HttpResponse, RequestContext
from webmisc.services import templates
from webmisc.services.i18n import tr
from webmisc.services.text import escape

logger = logging.getLogger(__name__)

_IP_RE = re.compile(r'^[a-z0-9:.]{7,}$')
UNKNOWN_IP = '0.0.0.0'

AUTH_REALM = 'HTTP Basic Authentication'
NOT_FOUND_TEMPLATE = '404.html'
HTML_CONTENT_TYPE = 'text/html; charset=utf-8'


def current_url(ctx: RequestContext) -> str:
    """
    Rebuild the absolute URL of the current request.

    The port is included only when it is not the scheme's default.
    """
    scheme = 'https' if ctx.https else 'http'
    default_port = 443 if ctx.https else 80
    domain = ctx.server_name
    if ctx.server_port and int(ctx.server_port) != default_port:
        domain = f"{domain}:{ctx.server_port}"
    return f"{scheme}://{domain}{ctx.request_uri}"


def client_ip(ctx: RequestContext) -> str:
    """
    Get the client IP address.

    Priority: X-Forwarded-For (first hop) -> Client-IP -> remote address.
    Anything that does not look like an address yields '0.0.0.0'.
    """
    forwarded = ctx.header('X-Forwarded-For')
    if forwarded:
        ip = forwarded.split(',')[0].strip()
    else:
        ip = ctx.header('Client-IP') or ctx.remote_addr
    return ip if _IP_RE.match(ip or '') else UNKNOWN_IP


def get_browser_lang(ctx: RequestContext) -> str:
    """First two lowercase letters of the preferred Accept-Language entry."""
    first = ctx.header('Accept-Language').split(',')[0].rstrip()
    return escape(first[:2].lower())


def redirect(url: str, permanent: bool = True) -> HttpResponse:
    """Redirect response (301 when permanent, else 302)."""
    return HttpResponse(
        status_code=301 if permanent else 302,
        headers={'Location': url}
    )


def error_404(page_path: Optional[str] = None) -> HttpResponse:
    """
    'Not Found' response.

    Args:
        page_path: Custom error page; the packaged page is used when it is
            empty or missing

    Returns:
        HttpResponse: 404 with an HTML body
    """
    if page_path and os.path.isfile(page_path):
        with open(page_path, 'r', encoding='utf-8') as f:
            body = f.read()
    else:
        body = templates.load_template(NOT_FOUND_TEMPLATE)

    return HttpResponse(
        status_code=404,
        headers={'Content-Type': HTML_CONTENT_TYPE},
        body=body
    )


def get_page(page_path: str) -> HttpResponse:
    """Serve a page file, or a 404 response if it does not exist."""
    if not os.path.isfile(page_path):
        logger.info(f"Page not found: {page_path}")
        return error_404()

    with open(page_path, 'r', encoding='utf-8') as f:
        body = f.read()

    return HttpResponse(
        status_code=200,
        headers={'Content-Type': HTML_CONTENT_TYPE},
        body=body
    )


def require_auth(ctx: RequestContext, username: str, password: str) -> Optional[HttpResponse]:
    """
    Check HTTP Basic credentials.

    Args:
        ctx: Request context carrying the submitted credentials
        username: Expected user name
        password: Expected password

    Returns:
        None when the credentials match, otherwise a 401 response asking
        for credentials
    """
    submitted_user = ctx.auth_user or ''
    submitted_password = ctx.auth_password or ''

    user_ok = hmac.compare_digest(submitted_user.encode('utf-8'), username.encode('utf-8'))
    password_ok = hmac.compare_digest(submitted_password.encode('utf-8'), password.encode('utf-8'))
    if user_ok and password_ok:
        return None

    logger.warning(f"HTTP authentication failed for user '{submitted_user}' from {client_ip(ctx)}")
    return HttpResponse(
        status_code=401,
        headers={
            'WWW-Authenticate': f'Basic realm="{AUTH_REALM}"',
            'Content-Type': 'text/plain; charset=utf-8',
        },
        body=tr('You must enter a valid login ID and password to access this resource.') + '\n'
    )
