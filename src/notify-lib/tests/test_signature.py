"""
tests/test_signature.py — X-TFE-Notification-Signature verification.

Coverage assertions:
  - HMAC-SHA512(token, body) hex signature is accepted.
  - A flipped bit in the body or in the signature is rejected.
  - Unsigned requests pass whether or not a token is configured.
  - A signature without a configured token is a ConfigurationError, not a mismatch.
"""

from __future__ import annotations

import hashlib
import hmac

import pytest
from tfe_notify.exceptions import ConfigurationError, SignatureMismatchError
from tfe_notify.signature import SIGNATURE_HEADER, compute_signature, verify_signature

TOKEN = "notification-token"  # pragma: allowlist secret
BODY = b'{"payload_version":1,"run_id":"run-abc"}'


def _flip_bit(data: bytes, index: int = 0) -> bytes:
    flipped = bytearray(data)
    flipped[index] ^= 0x01
    return bytes(flipped)


def test_header_name() -> None:
    assert SIGNATURE_HEADER == "X-TFE-Notification-Signature"


def test_compute_signature_is_hmac_sha512_hex() -> None:
    expected = hmac.new(TOKEN.encode(), BODY, hashlib.sha512).hexdigest()
    assert compute_signature(BODY, TOKEN) == expected
    assert len(compute_signature(BODY, TOKEN)) == 128


def test_valid_signature_accepted() -> None:
    verify_signature(BODY, compute_signature(BODY, TOKEN), TOKEN)


def test_uppercase_hex_signature_accepted() -> None:
    verify_signature(BODY, compute_signature(BODY, TOKEN).upper(), TOKEN)


def test_signature_and_token_are_whitespace_stripped() -> None:
    signature = compute_signature(BODY, TOKEN)
    verify_signature(BODY, f"  {signature}\n", f" {TOKEN} ")


@pytest.mark.parametrize("index", [0, 10, len(BODY) - 1])
def test_flipped_body_bit_rejected(index: int) -> None:
    signature = compute_signature(BODY, TOKEN)
    with pytest.raises(SignatureMismatchError):
        verify_signature(_flip_bit(BODY, index), signature, TOKEN)


@pytest.mark.parametrize("index", [0, 31, 63])
def test_flipped_signature_bit_rejected(index: int) -> None:
    digest = bytes.fromhex(compute_signature(BODY, TOKEN))
    with pytest.raises(SignatureMismatchError):
        verify_signature(BODY, _flip_bit(digest, index).hex(), TOKEN)


def test_wrong_token_rejected() -> None:
    with pytest.raises(SignatureMismatchError):
        verify_signature(BODY, compute_signature(BODY, "other-token"), TOKEN)


def test_non_hex_signature_rejected() -> None:
    with pytest.raises(SignatureMismatchError):
        verify_signature(BODY, "not-hex-at-all", TOKEN)


def test_truncated_signature_rejected() -> None:
    with pytest.raises(SignatureMismatchError):
        verify_signature(BODY, compute_signature(BODY, TOKEN)[:64], TOKEN)


@pytest.mark.parametrize("secret", [None, "", TOKEN])
@pytest.mark.parametrize("signature", [None, "", "   "])
def test_unsigned_request_accepted_regardless_of_secret(
    signature: str | None, secret: str | None
) -> None:
    verify_signature(BODY, signature, secret)


@pytest.mark.parametrize("secret", [None, "", "  "])
def test_signature_without_secret_is_configuration_error(secret: str | None) -> None:
    with pytest.raises(ConfigurationError):
        verify_signature(BODY, compute_signature(BODY, TOKEN), secret)


def test_configuration_error_is_fatal_and_mismatch_is_not() -> None:
    assert ConfigurationError.fatal is True
    assert ConfigurationError.status_code == 500
    assert SignatureMismatchError.fatal is False
    assert SignatureMismatchError.status_code == 400
