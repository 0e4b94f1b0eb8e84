"""
Registration pipeline - composes the validators and the mailer.

This module handles a sign-up form submission end to end:
1. Check every required field is filled out
2. Validate username, password (and confirmation), email and names
3. Send the welcome email
4. Return result (success or failure)

All errors are caught and returned as RegistrationResult with success=False.
No exceptions propagate out of the public methods.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from webmisc.domain.models import EmailMessage, RegistrationResult, RequestContext
from webmisc.services import mail as mail_service
from webmisc.services import validation
from webmisc.services.i18n import tr
from webmisc.services.text import escape, gravatar_url

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    'username', 'password', 'password_confirm', 'email', 'first_name', 'last_name',
)

# Tag reported when the password confirmation differs
MISMATCH_TAG = 'notidentical'


class RegistrationProcessor:
    """
    Validates sign-up forms and sends the welcome email.

    Returns RegistrationResult for explicit success/failure handling.
    """

    def __init__(self, site_name: Optional[str] = None):
        """
        Args:
            site_name: Name used in the welcome email (default: request host)
        """
        self.site_name = site_name

    def process(self, form: Mapping[str, Any], ctx: Optional[RequestContext] = None) -> RegistrationResult:
        """
        Process a single registration form.

        Args:
            form: Submitted fields (see REQUIRED_FIELDS)
            ctx: Request context of the submission

        Returns:
            RegistrationResult with success=True or success=False (errors logged)
        """
        username = str(form.get('username') or '')
        logger.info(f"Processing registration: username={username}")

        try:
            errors = self._validate(form)
            if errors:
                logger.info(f"Registration rejected: username={username}, errors={errors}")
                return RegistrationResult(success=False, username=username, errors=errors)

            mail_sent = self._send_welcome(form, ctx)
            if not mail_sent:
                return RegistrationResult(
                    success=False,
                    username=username,
                    error_message="Welcome email was not accepted for delivery"
                )

            logger.info(f"Registration accepted: username={username}")
            return RegistrationResult(success=True, username=username, mail_sent=True)

        except Exception as e:
            logger.error(f"Failed to process registration for {username}: {e}", exc_info=True)
            return RegistrationResult(success=False, username=username, error_message=str(e))

    def _validate(self, form: Mapping[str, Any]) -> Dict[str, str]:
        """
        Validate every field.

        Returns:
            Dict[str, str]: Field name -> sentinel tag for each failed field
        """
        required = {name: form.get(name) for name in REQUIRED_FIELDS}
        if not validation.filled_out(required):
            return {
                name: 'empty' for name, value in required.items()
                if value is None or value == ''
            }

        results = {
            'username': validation.validate_username(form['username']),
            'password': validation.validate_password(form['password']),
            'email': validation.validate_email(form['email']),
            'first_name': validation.validate_name(form['first_name']),
            'last_name': validation.validate_name(form['last_name']),
        }
        errors = {name: result.tag for name, result in results.items() if not result}

        if not validation.validate_identical(form['password'], form['password_confirm']):
            errors['password_confirm'] = MISMATCH_TAG

        return errors

    def _send_welcome(self, form: Mapping[str, Any], ctx: Optional[RequestContext]) -> bool:
        """Send the welcome email; returns whether the transport accepted it."""
        site = self.site_name or (ctx.host if ctx is not None else 'our site')
        first_name = escape(form['first_name'])
        avatar = escape(gravatar_url(form['email']))

        body = (
            f"<p>{tr('Hello %0%,', first_name)}</p>"
            f"<p>{tr('Welcome to %0%! Your account %1% is ready.', escape(site), escape(form['username']))}</p>"
            f"<p><img src=\"{avatar}\" alt=\"avatar\" /></p>"
        )

        message = EmailMessage(
            to=form['email'],
            subject=tr('Welcome to %0%', site),
            body=body
        )
        return mail_service.send_mail(message, ctx)
