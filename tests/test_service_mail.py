"""
Tests for email composition and sending.
"""

import pytest
from unittest.mock import patch
from email import policy
from email.parser import BytesParser
from botocore.exceptions import ClientError, EndpointConnectionError
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from webmisc.domain.models import EmailMessage, RequestContext
from webmisc.services import mail


@pytest.fixture
def message():
    return EmailMessage(
        to='user@example.com',
        subject='Welcome',
        body='<b>Hello</b>',
        from_address='support@example.com'
    )


@pytest.fixture(autouse=True)
def server_identity():
    with patch('webmisc.config.SERVER_ADMIN', 'admin@example.com'), \
            patch('webmisc.config.SERVER_NAME', 'example.com'):
        yield


def _parse(raw: bytes):
    return BytesParser(policy=policy.default).parsebytes(raw)


class TestComposeMail:
    """Test multipart/alternative serialization."""

    def test_text_part_has_no_tags(self, message):
        composed = mail.compose_mail(message)

        assert composed.text_body == 'Hello'
        assert '<' not in composed.text_body
        assert '>' not in composed.text_body

    def test_html_part_keeps_tags(self, message):
        composed = mail.compose_mail(message)

        assert '<b>Hello</b>' in composed.html_body
        assert '<title>Welcome</title>' in composed.html_body
        assert '<div style="text-align:center"><b>Hello</b></div>' in composed.html_body

    def test_subject_is_escaped_in_title(self, message):
        message.subject = 'Tom & Jerry <3'
        composed = mail.compose_mail(message)
        assert '<title>Tom &amp; Jerry &lt;3</title>' in composed.html_body

    def test_bare_less_than_survives_in_text_part(self, message):
        message.body = 'Price < 5 dollars, buy now'
        composed = mail.compose_mail(message)
        assert composed.text_body == 'Price < 5 dollars, buy now'

    @pytest.mark.parametrize('field, value', [
        ('subject', 'Hi\r\nBcc: evil@x.com'),
        ('to', 'a@b.com\nBcc: evil@x.com'),
        ('from_address', 'x@y.com\rBcc: evil@x.com'),
    ])
    def test_line_breaks_in_header_values_rejected(self, message, field, value):
        setattr(message, field, value)
        with pytest.raises(ValueError, match="must not contain line breaks"):
            mail.compose_mail(message)

    def test_line_breaks_in_host_rejected(self, message):
        with pytest.raises(ValueError, match="Host must not contain line breaks"):
            mail.compose_mail(message, host='evil\r\nBcc: evil@x.com')

    def test_headers(self, message):
        composed = mail.compose_mail(message)

        assert composed.headers.startswith('From: "example.com" <admin@example.com>\r\n')
        assert 'Reply-To: <support@example.com>\r\n' in composed.headers
        assert 'MIME-Version: 1.0\r\n' in composed.headers
        assert f'Content-Type: multipart/alternative; boundary="{composed.boundary}"\r\n' in composed.headers

    def test_missing_sender_uses_admin_address(self, message):
        message.from_address = None
        composed = mail.compose_mail(message)
        assert 'Reply-To: <admin@example.com>\r\n' in composed.headers

    def test_explicit_admin_and_host(self, message):
        composed = mail.compose_mail(message, admin_address='root@site.test', host='site.test')
        assert composed.headers.startswith('From: "site.test" <root@site.test>\r\n')

    def test_body_structure(self, message):
        composed = mail.compose_mail(message)
        boundary = composed.boundary

        assert composed.body.count(f'--{boundary}\r\n') == 2
        assert composed.body.endswith(f'--{boundary}--\r\n')
        assert 'Content-Type: text/plain; charset="utf-8"\r\n' in composed.body
        assert 'Content-Type: text/html; charset="utf-8"\r\n' in composed.body
        assert composed.body.count('Content-Transfer-Encoding: 8bit\r\n') == 2

    def test_boundary_is_random(self, message):
        assert mail.compose_mail(message).boundary != mail.compose_mail(message).boundary

    def test_text_wrapped_at_70_columns(self, message):
        message.body = '<p>' + ' '.join(['lorem'] * 50) + '</p>'
        composed = mail.compose_mail(message)
        assert all(len(line) <= 70 for line in composed.text_body.split('\n'))

    def test_raw_message_parses_as_multipart(self, message):
        composed = mail.compose_mail(message)
        parsed = _parse(composed.as_raw().encode('utf-8'))

        assert parsed.get_content_type() == 'multipart/alternative'
        assert parsed['To'] == 'user@example.com'
        assert parsed['Subject'] == 'Welcome'

        parts = list(parsed.iter_parts())
        assert [p.get_content_type() for p in parts] == ['text/plain', 'text/html']
        assert '<' not in parts[0].get_content()
        assert '<b>Hello</b>' in parts[1].get_content()


class TestSendMail:
    """Test handing messages to SES."""

    @patch('webmisc.services.mail.ses_client')
    def test_send_success(self, mock_ses_client, message):
        mock_ses_client.send_raw_email.return_value = {'MessageId': 'ses-123'}

        assert mail.send_mail(message) is True

        kwargs = mock_ses_client.send_raw_email.call_args.kwargs
        assert kwargs['Source'] == 'admin@example.com'
        assert kwargs['Destinations'] == ['user@example.com']
        parsed = _parse(kwargs['RawMessage']['Data'])
        assert parsed['Subject'] == 'Welcome'
        assert 'support@example.com' in str(parsed['Reply-To'])

    @patch('webmisc.services.mail.ses_client')
    def test_host_from_request_context(self, mock_ses_client, message):
        mock_ses_client.send_raw_email.return_value = {'MessageId': 'ses-123'}
        ctx = RequestContext(headers={'Host': 'shop.example.org'})

        mail.send_mail(message, ctx)

        raw = mock_ses_client.send_raw_email.call_args.kwargs['RawMessage']['Data']
        assert b'From: "shop.example.org" <admin@example.com>' in raw

    @patch('webmisc.services.mail.ses_client')
    def test_injected_subject_never_reaches_ses(self, mock_ses_client):
        message = EmailMessage(to='a@b.com', subject='Hi\r\nBcc: evil@x.com', body='b')

        with pytest.raises(ValueError):
            mail.send_mail(message)
        mock_ses_client.send_raw_email.assert_not_called()

    @patch('webmisc.services.mail.ses_client')
    def test_injected_host_header_never_reaches_ses(self, mock_ses_client, message):
        ctx = RequestContext(headers={'Host': 'shop.example.org\r\nBcc: evil@x.com'})

        with pytest.raises(ValueError):
            mail.send_mail(message, ctx)
        mock_ses_client.send_raw_email.assert_not_called()

    @patch('webmisc.services.mail.ses_client')
    def test_non_ascii_subject_is_encoded(self, mock_ses_client, message):
        mock_ses_client.send_raw_email.return_value = {'MessageId': 'ses-123'}
        message.subject = 'Bienvenue à bord'

        mail.send_mail(message)

        raw = mock_ses_client.send_raw_email.call_args.kwargs['RawMessage']['Data']
        assert b'Subject: =?utf-8?' in raw
        assert _parse(raw)['Subject'] == 'Bienvenue à bord'

    @patch('webmisc.services.mail.ses_client')
    def test_send_rejected(self, mock_ses_client, message):
        mock_ses_client.send_raw_email.side_effect = ClientError(
            {'Error': {'Code': 'MessageRejected', 'Message': 'Email address is not verified'}},
            'SendRawEmail'
        )
        assert mail.send_mail(message) is False

    @patch('webmisc.services.mail.ses_client')
    def test_send_connection_error(self, mock_ses_client, message):
        mock_ses_client.send_raw_email.side_effect = EndpointConnectionError(
            endpoint_url='https://email.us-east-1.amazonaws.com'
        )
        assert mail.send_mail(message) is False

    @patch('webmisc.services.mail.ses_client')
    def test_empty_recipient(self, mock_ses_client, message):
        message.to = ''
        with pytest.raises(ValueError, match="recipient cannot be empty"):
            mail.send_mail(message)
        mock_ses_client.send_raw_email.assert_not_called()
