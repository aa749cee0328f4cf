"""Unit tests for scripts/send_notification.py."""

from __future__ import annotations

import importlib.util
import json
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import requests
from tfe_notify import NotificationPayload, compute_signature, to_message_card


def _load_script_module() -> Any:
    repo_root = Path(__file__).resolve().parents[2]
    spec = importlib.util.spec_from_file_location(
        "send_notification_script", repo_root / "scripts" / "send_notification.py"
    )
    assert spec and spec.loader
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    spec.loader.exec_module(module)  # type: ignore[union-attr]
    return module


sn: Any = _load_script_module()

_NOW = datetime(2026, 2, 25, 12, 0, 0, tzinfo=UTC)


def test_build_payload_is_a_valid_notification() -> None:
    payload = sn.build_payload(
        trigger="run:errored",
        message="Errored",
        workspace="networking",
        organization="acme",
        now=_NOW,
    )
    assert payload["run_created_at"] == "2026-02-25T12:00:00Z"

    card = to_message_card(NotificationPayload.from_dict(payload))
    assert card.title == "Errored in networking."
    assert card.theme_color == "#f5222d"
    assert card.potential_actions[0].uri.endswith("/acme/networking/runs/run-sample")


def test_build_headers_signs_when_token_given() -> None:
    body = b'{"payload_version": 1}'
    headers = sn.build_headers(body, "token")
    assert headers["X-TFE-Notification-Signature"] == compute_signature(body, "token")
    assert sn.build_headers(body, None) == {"Content-Type": "application/json"}


def test_main_posts_signed_payload(capsys) -> None:
    response = MagicMock(status_code=200, text='{"@type": "MessageCard"}')
    with patch("requests.post", return_value=response) as mock_post:
        code = sn.main(["--url", "http://localhost:9000/", "--token", "secret", "--trigger", "x"])

    assert code == 0
    args, kwargs = mock_post.call_args
    assert args == ("http://localhost:9000/",)
    body = kwargs["data"]
    assert json.loads(body)["notifications"][0]["trigger"] == "x"
    assert kwargs["headers"]["X-TFE-Notification-Signature"] == compute_signature(body, "secret")
    assert "MessageCard" in capsys.readouterr().out


def test_main_returns_1_on_non_2xx() -> None:
    response = MagicMock(status_code=400, text="invalid request")
    with patch("requests.post", return_value=response):
        assert sn.main(["--url", "http://localhost:9000/", "--payload-version", "2"]) == 1


def test_main_returns_1_when_unreachable() -> None:
    with patch("requests.post", side_effect=requests.ConnectionError("refused")):
        assert sn.main(["--url", "http://localhost:9000/"]) == 1
