"""
Form field validators.

Each field validator returns a ValidationResult naming the first rule the
value violated. Rules are checked in a fixed order (empty, too short,
too long, then format) and stop at the first failure. A value that is not
a string counts as empty.
"""

import logging
import re
from typing import Any, Mapping

from webmisc.domain.models import ValidationReason, ValidationResult

logger = logging.getLogger(__name__)

# Ends with one or more non-word characters (ASCII word class)
_BAD_USERNAME_TAIL = re.compile(r'[^\w]+$', re.ASCII)
_HAS_DIGIT = re.compile(r'[0-9]')
_HAS_UPPER = re.compile(r'[A-Z]')

# Email format (RFC 5322 simplified)
EMAIL_REGEX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@"
    r"[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)


def _check_length(value: Any, min_length: int, max_length: int):
    if not isinstance(value, str) or not value:
        return ValidationResult.invalid(ValidationReason.EMPTY)
    if len(value) < min_length:
        return ValidationResult.invalid(ValidationReason.TOO_SHORT)
    if len(value) > max_length:
        return ValidationResult.invalid(ValidationReason.TOO_LONG)
    return None


def validate_username(username: str, min_length: int = 4, max_length: int = 40) -> ValidationResult:
    """
    Validate a username.

    Args:
        username: Submitted username
        min_length: Minimum length (default: 4)
        max_length: Maximum length (default: 40)

    Returns:
        ValidationResult: ok, or empty / tooshort / toolong / badusername

    Example:
        >>> validate_username("ab").tag
        'tooshort'
        >>> validate_username("bad!").tag
        'badusername'
    """
    failure = _check_length(username, min_length, max_length)
    if failure is not None:
        return failure
    if _BAD_USERNAME_TAIL.search(username):
        return ValidationResult.invalid(ValidationReason.BAD_USERNAME)
    return ValidationResult.valid()


def validate_password(password: str, min_length: int = 6, max_length: int = 92) -> ValidationResult:
    """
    Validate a password.

    A password needs at least one digit and one uppercase letter.

    Args:
        password: Submitted password
        min_length: Minimum length (default: 6)
        max_length: Maximum length (default: 92)

    Returns:
        ValidationResult: ok, or empty / tooshort / toolong / nonumber / noupper
    """
    failure = _check_length(password, min_length, max_length)
    if failure is not None:
        return failure
    if not _HAS_DIGIT.search(password):
        return ValidationResult.invalid(ValidationReason.NO_NUMBER)
    if not _HAS_UPPER.search(password):
        return ValidationResult.invalid(ValidationReason.NO_UPPER)
    return ValidationResult.valid()


def validate_email(email: str) -> ValidationResult:
    """
    Validate an email address.

    Returns:
        ValidationResult: ok, or empty / bademail
    """
    if not email:
        return ValidationResult.invalid(ValidationReason.EMPTY)
    if not isinstance(email, str) or EMAIL_REGEX.fullmatch(email) is None:
        return ValidationResult.invalid(ValidationReason.BAD_EMAIL)
    return ValidationResult.valid()


def validate_name(name: Any, min_length: int = 2, max_length: int = 30) -> ValidationResult:
    """
    Validate a first or last name by length only (bounds inclusive).

    Returns:
        ValidationResult: ok, or empty / tooshort / toolong
    """
    failure = _check_length(name, min_length, max_length)
    return failure if failure is not None else ValidationResult.valid()


def filled_out(fields: Mapping[str, Any]) -> bool:
    """Check that the mapping is non-empty and every value is filled in."""
    if not fields:
        return False
    for name, value in fields.items():
        if value is None or value == '':
            logger.debug(f"Field not filled out: {name}")
            return False
    return True


def validate_identical(first: Any, second: Any) -> bool:
    """Check two values are identical (same type and value)."""
    return type(first) is type(second) and first == second
