"""Tests for password hashing and signed tokens."""

import pytest

from bus_tracker.core.security import (
    InvalidTokenError,
    create_token,
    decode_token,
    hash_password,
    validate_credentials,
    verify_password,
)

SECRET = "test-secret"


def test_password_hash_roundtrip():
    hashed = hash_password("hunter22")
    assert hashed != "hunter22"
    assert verify_password("hunter22", hashed)
    assert not verify_password("hunter23", hashed)


def test_token_roundtrip():
    token = create_token(7, "admin", secret_key=SECRET)
    assert decode_token(token, secret_key=SECRET) == {"id": 7, "role": "admin"}


def test_token_wrong_secret_rejected():
    token = create_token(7, "driver", secret_key=SECRET)
    with pytest.raises(InvalidTokenError):
        decode_token(token, secret_key="other-secret")


def test_tampered_token_rejected():
    token = create_token(7, "driver", secret_key=SECRET)
    with pytest.raises(InvalidTokenError):
        decode_token(token[:-2] + "xx", secret_key=SECRET)


def test_expired_token_rejected():
    token = create_token(7, "driver", secret_key=SECRET)
    with pytest.raises(InvalidTokenError):
        decode_token(token, secret_key=SECRET, max_age_seconds=-1)


def test_validate_credentials():
    assert validate_credentials("+919876543210", "secret1") is None
    assert validate_credentials("12345", "secret1") == "Enter a valid phone number"
    assert "at least 6" in validate_credentials("9876543210", "abc")
