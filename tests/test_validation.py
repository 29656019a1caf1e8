"""
Tests for the shared contact message rules
"""
import pytest

from validation import MIN_MESSAGE_LENGTH, MessageValidationError, ValidationErrorKind, validate_message


def test_valid_message_passes():
    validate_message("Jo", "a@b.com", "Hello there")


@pytest.mark.parametrize("name,email,message", [
    ("", "a@b.com", "Hello there"),
    ("Jo", "", "Hello there"),
    ("Jo", "a@b.com", ""),
    ("   ", "a@b.com", "Hello there"),
    ("Jo", " \t ", "Hello there"),
    ("Jo", "a@b.com", "\n\n"),
    (None, "a@b.com", "Hello there"),
    ("Jo", 42, "Hello there"),
])
def test_empty_fields_are_invalid_input(name, email, message):
    with pytest.raises(MessageValidationError) as exc_info:
        validate_message(name, email, message)
    assert exc_info.value.kind is ValidationErrorKind.INVALID_INPUT


@pytest.mark.parametrize("message", ["Hi", "1234", "  abcd  ", "a" * (MIN_MESSAGE_LENGTH - 1)])
def test_short_message_rejected(message):
    with pytest.raises(MessageValidationError) as exc_info:
        validate_message("Jo", "a@b.com", message)
    assert exc_info.value.kind is ValidationErrorKind.MESSAGE_TOO_SHORT


def test_message_at_minimum_length_accepted():
    validate_message("Jo", "a@b.com", "  " + "a" * MIN_MESSAGE_LENGTH + "  ")


@pytest.mark.parametrize("email", [
    "bad",
    "a@b",
    "a.b@c.com",
    "a@b.c0m",
    "a@b.co.uk",
    "a b@c.com",
    "@b.com",
    " a@b.com",
    "a@b.com\n",
])
def test_malformed_email_rejected(email):
    with pytest.raises(MessageValidationError) as exc_info:
        validate_message("Jo", email, "Hello there")
    assert exc_info.value.kind is ValidationErrorKind.INVALID_EMAIL


@pytest.mark.parametrize("email", ["a@b.com", "User01@Example.ORG", "x9@y9.io"])
def test_wellformed_email_accepted(email):
    validate_message("Jo", email, "Hello there")


def test_empty_check_runs_before_length_and_email():
    with pytest.raises(MessageValidationError) as exc_info:
        validate_message("", "bad", "Hi")
    assert exc_info.value.kind is ValidationErrorKind.INVALID_INPUT

    with pytest.raises(MessageValidationError) as exc_info:
        validate_message("Jo", "bad", "Hi")
    assert exc_info.value.kind is ValidationErrorKind.MESSAGE_TOO_SHORT


def test_error_message_is_kind_text():
    error = MessageValidationError(ValidationErrorKind.INVALID_EMAIL)
    assert str(error) == "Invalid email"
