"""
Contact message validation shared by the request handler and the contact form.
"""
import re
from enum import Enum
from typing import Any

MIN_MESSAGE_LENGTH = 5
EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9]+@[A-Za-z0-9]+\.[A-Za-z]+$")


class ValidationErrorKind(str, Enum):
    INVALID_INPUT = "Invalid input"
    MESSAGE_TOO_SHORT = "Message too short"
    INVALID_EMAIL = "Invalid email"


class MessageValidationError(ValueError):
    """A contact message that must not be sent or stored"""

    def __init__(self, kind: ValidationErrorKind):
        super().__init__(kind.value)
        self.kind = kind


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def validate_message(name: Any, email: Any, message: Any) -> None:
    """Raise MessageValidationError for the first rule the input breaks.

    Order matters: empty fields are reported before a short message, and a
    short message before a malformed email.
    """
    if not _text(name) or not _text(email) or not _text(message):
        raise MessageValidationError(ValidationErrorKind.INVALID_INPUT)

    if len(_text(message)) < MIN_MESSAGE_LENGTH:
        raise MessageValidationError(ValidationErrorKind.MESSAGE_TOO_SHORT)

    # the raw value is matched, so surrounding whitespace is an invalid email
    if not EMAIL_PATTERN.fullmatch(email):
        raise MessageValidationError(ValidationErrorKind.INVALID_EMAIL)
