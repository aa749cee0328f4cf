"""
tfe_notify — Terraform Cloud/Enterprise notification → Microsoft Teams translation library.

Authenticator, Translator and Forwarder stages used by the notification
relay Lambda. Every stage raises a RelayError subclass instead of producing
an HTTP response.
"""

from tfe_notify.config import RelayConfig
from tfe_notify.exceptions import (
    ConfigurationError,
    DeliveryError,
    MalformedPayloadError,
    RelayError,
    ValidationError,
)
from tfe_notify.forwarder import forward_card
from tfe_notify.models import MessageCard, NotificationPayload
from tfe_notify.signature import SIGNATURE_HEADER, compute_signature, verify_signature
from tfe_notify.translator import check_payload_version, to_message_card

__all__ = [
    "SIGNATURE_HEADER",
    "ConfigurationError",
    "DeliveryError",
    "MalformedPayloadError",
    "MessageCard",
    "NotificationPayload",
    "RelayConfig",
    "RelayError",
    "ValidationError",
    "check_payload_version",
    "compute_signature",
    "forward_card",
    "to_message_card",
    "verify_signature",
]
