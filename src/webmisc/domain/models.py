"""
Data models shared by the helpers.

These type-safe data structures define clear contracts between components.
"""

import base64
import binascii
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional
from urllib.parse import urlencode


class ValidationReason(str, Enum):
    """Sentinel tags naming the first rule a field violated."""
    EMPTY = 'empty'
    TOO_SHORT = 'tooshort'
    TOO_LONG = 'toolong'
    BAD_USERNAME = 'badusername'
    NO_NUMBER = 'nonumber'
    NO_UPPER = 'noupper'
    BAD_EMAIL = 'bademail'


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of a field validator: valid, or invalid with one reason.

    Only the highest-priority violated rule is reported.

    Attributes:
        reason: The violated rule, or None when the value is valid
    """
    reason: Optional[ValidationReason] = None

    @classmethod
    def valid(cls) -> 'ValidationResult':
        return cls()

    @classmethod
    def invalid(cls, reason: ValidationReason) -> 'ValidationResult':
        return cls(reason=reason)

    @property
    def ok(self) -> bool:
        """Check if the value passed every rule."""
        return self.reason is None

    @property
    def tag(self) -> str:
        """Sentinel string: 'ok' or the reason value (e.g. 'tooshort')."""
        return 'ok' if self.reason is None else self.reason.value

    def __bool__(self) -> bool:
        return self.ok

    def __repr__(self) -> str:
        if self.ok:
            return "ValidationResult(ok)"
        return f"ValidationResult(invalid={self.reason.value})"


@dataclass
class EmailMessage:
    """
    Outgoing email before serialization.

    Attributes:
        to: Recipient address
        subject: Subject line
        body: HTML body
        from_address: Reply-to address (server admin address if empty)
    """
    to: str
    subject: str
    body: str
    from_address: Optional[str] = None


@dataclass
class ComposedEmail:
    """
    Serialized multipart/alternative email.

    Attributes:
        boundary: Random token delimiting the MIME parts
        headers: CRLF-terminated header block (From, Reply-To, MIME, Content-Type)
        body: Multipart body containing the text and HTML parts
        text_body: Plain-text rendition (tags stripped, wrapped at 70 columns)
        html_body: HTML rendition wrapped in the mail template
        to: Recipient address
        subject: Subject line
    """
    boundary: str
    headers: str
    body: str
    text_body: str
    html_body: str
    to: str
    subject: str

    def as_raw(self, encoded_subject: Optional[str] = None) -> str:
        """
        Render the complete RFC 5322 message (To and Subject prepended).

        Args:
            encoded_subject: Header-encoded subject (defaults to the plain subject)

        Returns:
            str: Raw message suitable for a raw-mail transport
        """
        subject = encoded_subject if encoded_subject is not None else self.subject
        return (
            f"To: {self.to}\r\n"
            f"Subject: {subject}\r\n"
            f"{self.headers}"
            f"\r\n"
            f"{self.body}"
        )


@dataclass
class RequestContext:
    """
    Request-derived inputs passed explicitly to helpers that need them.

    Header names are matched case-insensitively.

    Attributes:
        headers: HTTP request headers
        remote_addr: Address of the connecting peer
        server_name: Host name the server answers to
        server_port: Port the request arrived on
        https: Whether the request arrived over TLS
        request_uri: Path plus query string
        auth_user: HTTP Basic user name (None when absent)
        auth_password: HTTP Basic password (None when absent)
    """
    headers: Dict[str, str] = field(default_factory=dict)
    remote_addr: str = ''
    server_name: str = 'localhost'
    server_port: int = 80
    https: bool = False
    request_uri: str = '/'
    auth_user: Optional[str] = None
    auth_password: Optional[str] = None

    def __post_init__(self):
        self.headers = {k.lower(): v for k, v in (self.headers or {}).items()}

    def header(self, name: str, default: str = '') -> str:
        """Get a header value by case-insensitive name."""
        return self.headers.get(name.lower(), default) or default

    @property
    def host(self) -> str:
        """Host header, falling back to the server name."""
        return self.header('Host') or self.server_name

    @classmethod
    def from_lambda_event(cls, event: Dict[str, Any]) -> 'RequestContext':
        """
        Build a context from an API Gateway (REST, proxy integration) event.

        Args:
            event: Lambda proxy event

        Returns:
            RequestContext populated from headers, identity and path
        """
        headers = {k.lower(): v for k, v in (event.get('headers') or {}).items()}
        identity = (event.get('requestContext') or {}).get('identity') or {}

        proto = headers.get('x-forwarded-proto', 'http').lower()
        https = proto == 'https'
        default_port = '443' if https else '80'
        try:
            port = int(headers.get('x-forwarded-port', default_port))
        except ValueError:
            port = int(default_port)

        path = event.get('path') or '/'
        query = event.get('queryStringParameters') or {}
        if query:
            path += '?' + urlencode(query)

        user, password = _parse_basic_auth(headers.get('authorization', ''))

        host = headers.get('host', 'localhost')
        return cls(
            headers=headers,
            remote_addr=identity.get('sourceIp', ''),
            server_name=host.split(':')[0],
            server_port=port,
            https=https,
            request_uri=path,
            auth_user=user,
            auth_password=password,
        )


def _parse_basic_auth(value: str):
    """Decode an ``Authorization: Basic`` header into (user, password)."""
    scheme, _, token = value.partition(' ')
    if scheme.lower() != 'basic' or not token:
        return None, None
    try:
        decoded = base64.b64decode(token.strip(), validate=True).decode('utf-8')
    except (binascii.Error, UnicodeDecodeError):
        return None, None
    user, sep, password = decoded.partition(':')
    if not sep:
        return None, None
    return user, password


@dataclass
class HttpResponse:
    """
    Response shaped by a helper instead of being written to the client.

    Attributes:
        status_code: HTTP status code
        headers: Response headers
        body: Response body
    """
    status_code: int = 200
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ''

    def to_lambda_response(self) -> Dict[str, Any]:
        """Convert to the API Gateway proxy response format."""
        return {
            'statusCode': self.status_code,
            'headers': dict(self.headers),
            'body': self.body,
        }


@dataclass
class RegistrationResult:
    """
    Result of the registration pipeline.

    This explicit result type makes success/failure handling clear
    and prevents exceptions from being used for control flow.

    Attributes:
        success: Whether every field passed and the welcome mail was handed off
        username: Submitted user name (may be empty)
        errors: Field name -> sentinel tag for every failed field
        mail_sent: Whether the mail transport accepted the welcome email
        error_message: Description of an unexpected failure
    """
    success: bool
    username: str = ''
    errors: Dict[str, str] = field(default_factory=dict)
    mail_sent: bool = False
    error_message: Optional[str] = None

    def __repr__(self) -> str:
        """Human-readable representation for logging."""
        if self.success:
            return f"RegistrationResult(success=True, username={self.username})"
        return f"RegistrationResult(success=False, username={self.username}, errors={self.errors})"
