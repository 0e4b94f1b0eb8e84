"""
Tests for string helpers.
"""

import hashlib
import pytest
import sys
import os
from urllib.parse import parse_qs, urlparse

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from webmisc.services import text


class TestEscape:
    """Test HTML escaping and tag stripping."""

    def test_escapes_special_characters_and_quotes(self):
        result = text.escape('<a href="x">O\'Neil & co</a>')
        assert result == '&lt;a href=&quot;x&quot;&gt;O&#x27;Neil &amp; co&lt;/a&gt;'

    def test_strip_mode_removes_tags(self):
        assert text.escape('<p>Hello <b>you</b></p>', strip=True) == 'Hello you'

    def test_plain_text_unchanged(self):
        assert text.escape('plain text') == 'plain text'


class TestStripTags:
    """Test tag removal."""

    def test_removes_tags_with_attributes(self):
        assert text.strip_tags('<div class="x">Hi</div><br/>') == 'Hi'

    def test_unterminated_tag_is_removed(self):
        """Test an unclosed tag is stripped to the end of the text."""
        assert text.strip_tags('Hello <b') == 'Hello '

    def test_bare_less_than_is_text(self):
        """Test a '<' that cannot open a tag is kept."""
        assert text.strip_tags('<p>If x < 10 you win a prize</p>') == 'If x < 10 you win a prize'
        assert text.strip_tags('Price < 5 dollars, buy now') == 'Price < 5 dollars, buy now'

    def test_comments_and_closing_tags_removed(self):
        assert text.strip_tags('a<!-- note -->b</i>c<?xml v?>') == 'abc'


class TestWordwrap:
    """Test wrapping at a column width."""

    def test_short_text_unchanged(self):
        assert text.wordwrap('short line', 70) == 'short line'

    def test_long_line_is_wrapped(self):
        line = ' '.join(['word'] * 40)
        wrapped = text.wordwrap(line, 70)
        assert all(len(part) <= 70 for part in wrapped.split('\n'))
        assert wrapped.replace('\n', ' ') == line

    def test_existing_line_breaks_kept(self):
        assert text.wordwrap('one\ntwo\n\nthree', 70) == 'one\ntwo\n\nthree'

    def test_long_words_are_not_split(self):
        word = 'x' * 100
        assert text.wordwrap(f'a {word} b', 70) == f'a\n{word}\nb'

    def test_crlf_line_endings_preserved(self):
        line = ' '.join(['word'] * 20)
        wrapped = text.wordwrap(f'{line}\r\nshort\r\n', 70)

        assert '\r' not in wrapped.replace('\r\n', '')
        assert wrapped.endswith('\r\nshort\r\n')
        assert wrapped.count('\r\n') == 3
        assert all(len(part) <= 70 for part in wrapped.split('\r\n'))

    def test_tabs_kept_in_wrapped_line(self):
        line = 'a\tb ' + ' '.join(['word'] * 20)
        assert text.wordwrap(line, 70).startswith('a\tb word')


class TestGenerateHash:
    """Test random hash generation."""

    def test_default_length(self):
        assert len(text.generate_hash()) == 80

    def test_custom_length(self):
        assert len(text.generate_hash(16)) == 16

    def test_length_capped_at_128(self):
        assert len(text.generate_hash(500)) == 128

    def test_is_hexadecimal(self):
        int(text.generate_hash(), 16)

    def test_values_differ(self):
        assert text.generate_hash(client_ip='10.0.0.1') != text.generate_hash(client_ip='10.0.0.1')

    def test_negative_length_rejected(self):
        with pytest.raises(ValueError, match="cannot be negative"):
            text.generate_hash(-1)


class TestGravatarUrl:
    """Test Gravatar URL building."""

    def test_hash_of_lowercased_email(self):
        url = text.gravatar_url('User@Example.com ')
        expected = hashlib.md5(b'user@example.com').hexdigest()
        assert urlparse(url).path == f'/avatar/{expected}'

    def test_default_query(self):
        query = parse_qs(urlparse(text.gravatar_url('a@b.com')).query)
        assert query == {'d': ['wavatar'], 's': ['80'], 'r': ['g']}

    def test_custom_query(self):
        url = text.gravatar_url('a@b.com', default='identicon', size=120, rating='pg')
        query = parse_qs(urlparse(url).query)
        assert query == {'d': ['identicon'], 's': ['120'], 'r': ['pg']}


class TestIfsetor:
    """Test default substitution."""

    def test_value_returned_when_set(self):
        assert text.ifsetor('value', 'other') == 'value'

    def test_falsy_values_are_kept(self):
        assert text.ifsetor('', 'other') == ''
        assert text.ifsetor(0, 'other') == 0

    def test_default_for_none(self):
        assert text.ifsetor(None, 'other') == 'other'
        assert text.ifsetor(None) == ''
