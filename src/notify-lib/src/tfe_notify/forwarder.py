"""
tfe_notify.forwarder — Deliver a MessageCard to a Teams incoming webhook.

One synchronous POST, no retry. Any transport failure or non-2xx status
raises DeliveryError; the caller decides how to fail the request.
"""

from __future__ import annotations

import json
from typing import Any

import requests
from aws_lambda_powertools import Logger

from tfe_notify.exceptions import DeliveryError
from tfe_notify.models import MessageCard

logger = Logger(service="tfe-notify")


def forward_card(
    card: MessageCard,
    webhook_url: str,
    *,
    timeout: float,
    session: requests.Session | None = None,
) -> dict[str, Any]:
    """POST the card and return its serialised form.

    The returned dict is what was sent, not the Teams response body.
    """
    body = card.to_dict()
    data = json.dumps(body)
    post = session.post if session is not None else requests.post

    try:
        response = post(
            webhook_url,
            data=data,
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )
    except requests.RequestException as exc:
        logger.exception("Failed to reach Teams webhook")
        raise DeliveryError("Failed to reach Teams webhook") from exc

    if not 200 <= response.status_code < 300:
        logger.error(
            "Unexpected status code from Teams webhook",
            extra={"status_code": response.status_code, "payload": data},
        )
        raise DeliveryError(
            f"Teams webhook returned {response.status_code}", status_code=response.status_code
        )

    logger.info("MessageCard delivered", extra={"status_code": response.status_code})
    return body
