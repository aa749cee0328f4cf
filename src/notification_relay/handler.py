"""
notification_relay.handler — TFE run notification → Microsoft Teams relay Lambda.

Invoked by API Gateway once per TFE notification:
  1. Request gate: POST + Content-Type application/json, else 400
  2. Authenticate X-TFE-Notification-Signature (HMAC-SHA512), mismatch → 400
  3. Decode the payload, reject payload_version != 1 → 400
  4. Translate to a MessageCard
  5. POST the card to TEAMS_WEBHOOK_URL and echo it back with 200

Configuration errors and malformed payloads return 500, delivery failures 502.
Error bodies never carry internal detail.
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any

import requests
from aws_lambda_powertools import Logger, Tracer
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext
from tfe_notify import (
    SIGNATURE_HEADER,
    MalformedPayloadError,
    NotificationPayload,
    RelayConfig,
    RelayError,
    check_payload_version,
    forward_card,
    to_message_card,
    verify_signature,
)
from tfe_notify.exceptions import InvalidRequestError, UnsupportedPayloadVersionError

logger = Logger(service="notification-relay")
tracer = Tracer()

_JSON_CONTENT_TYPE = "application/json"
_GENERIC_MESSAGES = {
    400: "invalid request",
    500: "internal error",
    502: "failed to deliver notification",
}


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


def _response(status_code: int, body: dict[str, Any]) -> dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": _JSON_CONTENT_TYPE},
        "body": json.dumps(body),
    }


def error_response(status_code: int, code: str, request_id: str | None) -> dict[str, Any]:
    """Standard error body. The message is generic for the status code."""
    message = _GENERIC_MESSAGES.get(status_code, "internal error")
    return _response(
        status_code, {"error": {"code": code, "message": message, "requestId": request_id}}
    )


# ---------------------------------------------------------------------------
# Event accessors (API Gateway REST v1 and HTTP API v2)
# ---------------------------------------------------------------------------


def _http_method(event: dict[str, Any]) -> str:
    method = event.get("httpMethod")
    if not method:
        method = ((event.get("requestContext") or {}).get("http") or {}).get("method")
    return str(method or "").upper()


def _headers(event: dict[str, Any]) -> dict[str, str]:
    raw = event.get("headers") or {}
    return {str(k).lower(): str(v) for k, v in raw.items() if v is not None}


def _media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def _raw_body(event: dict[str, Any]) -> bytes:
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body, validate=True)
        except binascii.Error as exc:
            raise MalformedPayloadError("Body is not valid base64") from exc
    return body.encode("utf-8")


def _require_json_post(event: dict[str, Any], headers: dict[str, str]) -> None:
    method = _http_method(event)
    content_type = headers.get("content-type", "")
    if method != "POST" or _media_type(content_type) != _JSON_CONTENT_TYPE:
        logger.warning(
            "Invalid method / content-type",
            extra={"method": method, "content_type": content_type},
        )
        raise InvalidRequestError("Invalid method or content type")


def decode_payload(body: bytes) -> NotificationPayload:
    try:
        data = json.loads(body)
    except ValueError as exc:
        logger.error(
            "Failed to decode notification",
            extra={"raw_body": body.decode("utf-8", "replace")},
        )
        raise MalformedPayloadError("Body is not valid JSON") from exc
    return NotificationPayload.from_dict(data)


# ---------------------------------------------------------------------------
# Relay
# ---------------------------------------------------------------------------


@tracer.capture_method
def relay_notification(
    event: dict[str, Any],
    config: RelayConfig,
    *,
    request_id: str | None = None,
    session: requests.Session | None = None,
) -> dict[str, Any]:
    """Run one notification through gate → authenticate → translate → forward."""
    try:
        headers = _headers(event)
        _require_json_post(event, headers)

        body = _raw_body(event)
        verify_signature(body, headers.get(SIGNATURE_HEADER.lower()), config.tfe_webhook_token)

        payload = decode_payload(body)
        logger.append_keys(run_id=payload.run_id, workspace_id=payload.workspace_id)
        try:
            check_payload_version(payload)
        except UnsupportedPayloadVersionError as exc:
            logger.warning(
                "Payload version not supported", extra={"payload_version": exc.payload_version}
            )
            raise

        card = to_message_card(payload)
        sent = forward_card(
            card, config.teams_webhook_url, timeout=config.timeout_seconds, session=session
        )
    except RelayError as exc:
        if exc.fatal:
            logger.exception("Notification relay failed", extra={"error_code": exc.code})
        else:
            logger.warning("Rejected notification", extra={"reason": str(exc)})
        return error_response(exc.status_code, exc.code, request_id)

    logger.info("Notification relayed", extra={"title": card.title})
    return _response(200, sent)


@logger.inject_lambda_context(
    clear_state=True, correlation_id_path=correlation_paths.API_GATEWAY_REST
)
@tracer.capture_lambda_handler
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Lambda entry point."""
    request_id = context.aws_request_id

    try:
        config = RelayConfig.from_env()
    except RelayError as exc:
        logger.exception("Relay is misconfigured")
        return error_response(exc.status_code, exc.code, request_id)

    return relay_notification(event, config, request_id=request_id)
