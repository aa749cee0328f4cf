#!/usr/bin/env python3
"""
send_notification.py — Send a sample TFE run notification to the relay.

Builds a payload shaped like a Terraform Cloud notification, signs it with
the notification token when one is given, and POSTs it to the relay URL.

Exit codes:
    0  Relay returned 2xx
    1  Relay returned non-2xx or could not be reached

Usage:
    uv run python scripts/send_notification.py \\
        --url <relay_url> \\
        [--token <tfe_webhook_token>] \\
        [--trigger run:completed] \\
        [--message "Applied"] \\
        [--workspace my-workspace] \\
        [--organization my-org] \\
        [--payload-version 1]

TFE_WEBHOOK_TOKEN is used when --token is not given.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from datetime import UTC, datetime
from typing import Any

import requests
from tfe_notify import SIGNATURE_HEADER, compute_signature
from tfe_notify.models import RunTrigger

logger = logging.getLogger("send_notification")
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

DEFAULT_TIMEOUT_SECONDS = 15


def build_payload(
    *,
    trigger: str,
    message: str,
    workspace: str,
    organization: str,
    payload_version: int = 1,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Return a notification payload in the TFE version-1 shape."""
    timestamp = (now or datetime.now(UTC)).replace(microsecond=0).isoformat()
    timestamp = timestamp.replace("+00:00", "Z")
    return {
        "payload_version": payload_version,
        "notification_configuration_id": "nc-sample",
        "run_url": f"https://app.terraform.io/app/{organization}/{workspace}/runs/run-sample",
        "run_id": "run-sample",
        "run_message": "Triggered by send_notification.py",
        "run_created_at": timestamp,
        "run_created_by": "send-notification",
        "workspace_id": "ws-sample",
        "workspace_name": workspace,
        "organization_name": organization,
        "notifications": [
            {
                "message": message,
                "trigger": trigger,
                "run_status": "applied",
                "run_updated_at": timestamp,
                "run_updated_by": "send-notification",
            }
        ],
    }


def build_headers(body: bytes, token: str | None) -> dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if token:
        headers[SIGNATURE_HEADER] = compute_signature(body, token)
    return headers


def send(url: str, payload: dict[str, Any], token: str | None, timeout: float) -> int:
    body = json.dumps(payload).encode("utf-8")
    try:
        response = requests.post(
            url, data=body, headers=build_headers(body, token), timeout=timeout
        )
    except requests.RequestException as exc:
        logger.error("Request to %s failed: %s", url, exc)
        return 1

    logger.info("Relay responded %d", response.status_code)
    print(response.text)
    return 0 if 200 <= response.status_code < 300 else 1


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.split("\n\n")[0] if __doc__ else None)
    parser.add_argument("--url", required=True, help="Relay endpoint URL")
    parser.add_argument("--token", default=os.environ.get("TFE_WEBHOOK_TOKEN"))
    parser.add_argument(
        "--trigger",
        default=RunTrigger.COMPLETED.value,
        help="Run trigger, e.g. run:completed (unknown values are allowed)",
    )
    parser.add_argument("--message", default="Applied")
    parser.add_argument("--workspace", default="sample-workspace")
    parser.add_argument("--organization", default="sample-org")
    parser.add_argument("--payload-version", type=int, default=1)
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT_SECONDS)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    payload = build_payload(
        trigger=args.trigger,
        message=args.message,
        workspace=args.workspace,
        organization=args.organization,
        payload_version=args.payload_version,
    )
    return send(args.url, payload, args.token, args.timeout)


if __name__ == "__main__":
    sys.exit(main())
