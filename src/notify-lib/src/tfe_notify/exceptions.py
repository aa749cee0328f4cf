"""
tfe_notify.exceptions — Error hierarchy for the notification relay.

Two classes of error:
  - fatal: misconfiguration, undecodable payloads and delivery failures.
    Processing stops and the caller receives a 5xx with no detail.
  - validation: bad method/content-type, signature mismatch, unsupported
    payload version. The caller receives a generic 400.

Library code raises; only the Lambda handler turns these into responses.
"""


class RelayError(Exception):
    """Base class for all relay errors.

    Attributes:
        status_code: HTTP status returned to the caller.
        code:        Stable error code placed in the response body.
    """

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    fatal: bool = True


class ConfigurationError(RelayError):
    """Raised when the deployment is misconfigured (webhook URL, shared secret)."""

    status_code = 500
    code = "CONFIGURATION_ERROR"


class MalformedPayloadError(RelayError):
    """Raised when the inbound body is not a decodable notification payload."""

    status_code = 500
    code = "MALFORMED_PAYLOAD"


class DeliveryError(RelayError):
    """Raised when the Teams webhook cannot be reached or returns non-2xx."""

    status_code = 502
    code = "BAD_GATEWAY"

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.upstream_status = status_code
        super().__init__(message)


class ValidationError(RelayError):
    """Base class for request validation failures (always HTTP 400)."""

    status_code = 400
    code = "INVALID_REQUEST"
    fatal = False


class InvalidRequestError(ValidationError):
    """Raised for a wrong HTTP method or content type."""


class SignatureMismatchError(ValidationError):
    """Raised when X-TFE-Notification-Signature does not match the body."""


class UnsupportedPayloadVersionError(ValidationError):
    """Raised when payload_version is not the supported version."""

    def __init__(self, payload_version: int) -> None:
        self.payload_version = payload_version
        super().__init__(f"Payload version {payload_version!r} is not supported")


class EmptyNotificationsError(ValidationError):
    """Raised when the payload carries no notification entries."""
