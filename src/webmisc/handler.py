"""
AWS Lambda handler for the web helpers (API Gateway proxy integration).

Thin routing layer:
- POST /register runs the registration pipeline
- /admin/* requires HTTP Basic authentication
- anything else answers 404
"""

import json
import logging
from typing import Any, Dict

from webmisc import config
from webmisc.domain.models import HttpResponse, RequestContext
from webmisc.domain.registration import RegistrationProcessor
from webmisc.services import i18n
from webmisc.services.web import client_ip, error_404, get_browser_lang, require_auth

# Configure logging
logger = logging.getLogger()
logger.setLevel(config.LOG_LEVEL)

# Add console handler for local testing (AWS Lambda provides handlers automatically)
if not logger.handlers:
    console_handler = logging.StreamHandler()
    console_handler.setLevel(config.LOG_LEVEL)
    formatter = logging.Formatter('%(levelname)s - %(name)s - %(message)s')
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

# Initialize processor once at module level (reused across invocations)
registration_processor = RegistrationProcessor()


def _json_response(status_code: int, payload: Dict[str, Any]) -> Dict[str, Any]:
    return HttpResponse(
        status_code=status_code,
        headers={'Content-Type': 'application/json'},
        body=json.dumps(payload)
    ).to_lambda_response()


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Route an API Gateway proxy event.

    Args:
        event: Lambda proxy event
        context: Lambda context

    Returns:
        Dict in the API Gateway proxy response format
    """
    ctx = RequestContext.from_lambda_event(event)
    method = (event.get('httpMethod') or 'GET').upper()
    path = event.get('path') or '/'
    logger.info(f"{method} {path} from {client_ip(ctx)} (environment: {config.ENVIRONMENT})")

    try:
        i18n.install(get_browser_lang(ctx) or 'en')

        if path.startswith('/admin'):
            if not (config.ADMIN_USER and config.ADMIN_PASSWORD):
                logger.error("ADMIN_USER/ADMIN_PASSWORD not set, refusing admin access")
                return _json_response(503, {'error': 'Admin access is not configured'})
            challenge = require_auth(ctx, config.ADMIN_USER, config.ADMIN_PASSWORD)
            if challenge is not None:
                return challenge.to_lambda_response()
            return _json_response(200, {'status': 'ok', 'environment': config.ENVIRONMENT})

        if path == '/register':
            if method != 'POST':
                return _json_response(405, {'error': 'Method not allowed'})
            return _handle_register(event, ctx)

        return error_404().to_lambda_response()

    except Exception as e:
        logger.error(f"Error handling {method} {path}: {str(e)}", exc_info=True)
        return _json_response(500, {'error': 'Internal server error'})


def _handle_register(event: Dict[str, Any], ctx: RequestContext) -> Dict[str, Any]:
    try:
        form = json.loads(event.get('body') or '{}')
    except json.JSONDecodeError as e:
        logger.warning(f"Invalid registration payload: {e}")
        return _json_response(400, {'error': 'Body must be JSON'})

    if not isinstance(form, dict):
        return _json_response(400, {'error': 'Body must be a JSON object'})

    result = registration_processor.process(form, ctx)
    if result.success:
        return _json_response(200, {'username': result.username, 'mailSent': result.mail_sent})
    if result.errors:
        return _json_response(400, {'errors': result.errors})
    logger.error(f"Registration failed for {result.username}: {result.error_message}")
    return _json_response(500, {'error': 'Registration could not be completed'})


def health_check(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Simple health check endpoint for monitoring.
    """
    return _json_response(200, {
        'status': 'healthy',
        'environment': config.ENVIRONMENT,
        'adminAuthConfigured': bool(config.ADMIN_USER and config.ADMIN_PASSWORD),
    })
