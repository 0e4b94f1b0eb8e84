"""
Email composition and sending.

Messages are serialized as multipart/alternative (plain text + HTML) and
handed to Amazon SES as raw MIME. Sending reports whether SES accepted
the message, not whether it was delivered.
"""

import logging
import uuid
from email.header import Header
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from webmisc import config
from webmisc.domain.models import ComposedEmail, EmailMessage, RequestContext
from webmisc.services import templates
from webmisc.services.text import escape, strip_tags, wordwrap

logger = logging.getLogger(__name__)

TEXT_WRAP_WIDTH = 70
MAIL_TEMPLATE = 'mail.html'

# Configure SES client with timeouts to prevent infinite hangs
ses_config = Config(
    retries={
        'max_attempts': 1,  # 1 attempt total (no retries)
        'mode': 'standard'
    },
    connect_timeout=config.MAIL_CONNECT_TIMEOUT,
    read_timeout=config.MAIL_READ_TIMEOUT
)

# Initialize SES client at module level (thread-safe, reused across invocations)
ses_client = boto3.client('ses', region_name=config.MAIL_REGION, config=ses_config)


def _new_boundary() -> str:
    return f"-----={uuid.uuid4().hex}"


def _check_header_value(name: str, value: Optional[str]) -> None:
    """Reject values that would break out of their header line."""
    if value and ("\r" in value or "\n" in value):
        raise ValueError(f"{name} must not contain line breaks")


def _encode_subject(subject: str) -> str:
    if subject.isascii():
        return subject
    return Header(subject, 'utf-8').encode()


def _part(boundary: str, content_type: str, content: str) -> str:
    return (
        f"--{boundary}\r\n"
        f"Content-Type: {content_type}; charset=\"utf-8\"\r\n"
        f"Content-Transfer-Encoding: 8bit\r\n"
        f"\r\n{content}\r\n"
    )


def compose_mail(
    message: EmailMessage,
    admin_address: Optional[str] = None,
    host: Optional[str] = None
) -> ComposedEmail:
    """
    Serialize an email as multipart/alternative.

    The plain-text part is the body with tags stripped, wrapped at 70
    columns. The HTML part is the body wrapped in the mail template.

    Args:
        message: Message to serialize
        admin_address: Server address used as sender (default: SERVER_ADMIN)
        host: Display name for the sender (default: SERVER_NAME)

    Returns:
        ComposedEmail: Header block, body and both renditions

    Raises:
        ValueError: If a value written into a header contains CR or LF

    Example:
        >>> composed = compose_mail(EmailMessage(
        ...     to="user@example.com", subject="Hi", body="<b>Hello</b>"
        ... ))
        >>> composed.text_body
        'Hello'
    """
    admin_address = admin_address or config.SERVER_ADMIN
    host = host or config.SERVER_NAME
    reply_to = message.from_address or admin_address
    for name, value in (
        ('Recipient', message.to),
        ('Subject', message.subject),
        ('Sender address', admin_address),
        ('Reply-To address', reply_to),
        ('Host', host),
    ):
        _check_header_value(name, value)

    boundary = _new_boundary()

    text_body = wordwrap(strip_tags(message.body), TEXT_WRAP_WIDTH)
    html_body = templates.render(
        templates.load_template(MAIL_TEMPLATE),
        subject=escape(message.subject),
        body=message.body
    )

    # Sender stays on the server address so the mail is not flagged as spoofed
    headers = (
        f"From: \"{host}\" <{admin_address}>\r\n"
        f"Reply-To: <{reply_to}>\r\n"
        f"MIME-Version: 1.0\r\n"
        f"Content-Type: multipart/alternative; boundary=\"{boundary}\"\r\n"
    )

    body = (
        _part(boundary, 'text/plain', text_body)
        + _part(boundary, 'text/html', html_body)
        + f"--{boundary}--\r\n"
    )

    return ComposedEmail(
        boundary=boundary,
        headers=headers,
        body=body,
        text_body=text_body,
        html_body=html_body,
        to=message.to,
        subject=message.subject
    )


def send_mail(message: EmailMessage, context: Optional[RequestContext] = None) -> bool:
    """
    Compose an email and hand it to Amazon SES.

    Args:
        message: Message to send; an empty ``from_address`` falls back to
            the server admin address
        context: Request context whose Host header names the sender

    Returns:
        bool: True if SES accepted the message for delivery, False otherwise

    Raises:
        ValueError: If the recipient is empty or a header value contains CR or LF
    """
    if not message.to:
        raise ValueError("Email recipient cannot be empty")

    host = context.host if context is not None else None
    composed = compose_mail(message, host=host)
    raw = composed.as_raw(_encode_subject(message.subject))

    try:
        response = ses_client.send_raw_email(
            Source=config.SERVER_ADMIN,
            Destinations=[message.to],
            RawMessage={'Data': raw.encode('utf-8')}
        )
        logger.info(
            f"Email accepted by SES: to={message.to}, "
            f"message_id={response.get('MessageId', 'UNKNOWN')}"
        )
        return True

    except ClientError as e:
        error_code = e.response.get('Error', {}).get('Code', 'Unknown')
        error_message = e.response.get('Error', {}).get('Message', str(e))
        logger.error(
            f"SES rejected email: to={message.to}, "
            f"error_code={error_code}, error_message={error_message}"
        )
        return False

    except BotoCoreError as e:
        logger.error(f"Failed to reach SES for email to {message.to}: {e}")
        return False
