"""
tfe_notify.signature — HMAC-SHA512 verification of TFE notifications.

TFE signs each notification with the token configured on the notification
destination: X-TFE-Notification-Signature = hex(HMAC-SHA512(token, raw body)).
Unsigned requests are accepted; the destination may be configured without a
token.

Comparison is constant-time (hmac.compare_digest).
"""

from __future__ import annotations

import hashlib
import hmac

from aws_lambda_powertools import Logger

from tfe_notify.exceptions import ConfigurationError, SignatureMismatchError

logger = Logger(service="tfe-notify")

SIGNATURE_HEADER = "X-TFE-Notification-Signature"


def compute_signature(body: bytes, secret: str) -> str:
    """Return the hex HMAC-SHA512 of body keyed by secret."""
    return hmac.new(secret.strip().encode(), body, hashlib.sha512).hexdigest()


def verify_signature(body: bytes, signature: str | None, secret: str | None) -> None:
    """Raise unless the request is acceptable.

    Raises:
        ConfigurationError:     a signature was sent but no secret is configured.
        SignatureMismatchError: the signature is not valid hex or does not match.
    """
    signature = (signature or "").strip()
    if not signature:
        logger.debug("Notification is unsigned, skipping verification")
        return

    secret = (secret or "").strip()
    if not secret:
        raise ConfigurationError(
            "Received notification with signature, but TFE_WEBHOOK_TOKEN is not set"
        )

    expected = hmac.new(secret.encode(), body, hashlib.sha512).digest()
    try:
        received = bytes.fromhex(signature)
    except ValueError as exc:
        logger.warning("Signature is not valid hex")
        raise SignatureMismatchError("Signature is not valid hex") from exc

    if not hmac.compare_digest(received, expected):
        logger.warning(
            "Signature does not match",
            extra={
                "received_signature": received.hex(),
                "expected_signature": expected.hex(),
            },
        )
        raise SignatureMismatchError("Signature does not match")
