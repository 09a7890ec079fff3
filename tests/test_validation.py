"""Tests for message validation."""

import pytest

from msgdispatch.worker.validation import MAX_CONTENT_LENGTH, content_length, is_valid_message


@pytest.mark.parametrize(
    "length, expected",
    [
        (0, False),
        (1, True),
        (MAX_CONTENT_LENGTH, True),
        (MAX_CONTENT_LENGTH + 1, False),
    ],
)
def test_content_length_bounds(message_factory, length: int, expected: bool):
    message = message_factory(content="x" * length)
    assert is_valid_message(message) is expected


@pytest.mark.parametrize(
    "content, expected",
    [
        ("ş" * 500, True),  # 1000 bytes
        ("ş" * 501, False),  # 1002 bytes
        ("ş" * 600, False),
        ("ş" * 499 + "a", True),  # 999 bytes
        ("ş" * 499 + "ab", True),  # 1000 bytes
        ("ş" * 499 + "abc", False),  # 1001 bytes
    ],
)
def test_multibyte_content_counted_in_bytes(message_factory, content: str, expected: bool):
    assert is_valid_message(message_factory(content=content)) is expected


def test_content_length_is_utf8_bytes():
    assert content_length("hi") == 2
    assert content_length("ş") == 2
    assert content_length("") == 0
    assert content_length(None) == 0


def test_empty_recipient_is_invalid(message_factory):
    assert is_valid_message(message_factory(recipient="")) is False


def test_max_content_length():
    assert MAX_CONTENT_LENGTH == 1000
