"""
tfe_notify.config — Relay configuration read from the Lambda environment.

Environment variables:
    TEAMS_WEBHOOK_URL              required; absolute http(s) URL
    TFE_WEBHOOK_TOKEN              optional; shared secret for signature checks
    TEAMS_WEBHOOK_TIMEOUT_SECONDS  optional; outbound HTTP timeout (default 10)
"""

from __future__ import annotations

import math
import os
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import urlsplit

from tfe_notify.exceptions import ConfigurationError

_WEBHOOK_URL_ENV = "TEAMS_WEBHOOK_URL"
_WEBHOOK_TOKEN_ENV = "TFE_WEBHOOK_TOKEN"  # pragma: allowlist secret
_TIMEOUT_ENV = "TEAMS_WEBHOOK_TIMEOUT_SECONDS"
DEFAULT_TIMEOUT_SECONDS: float = 10.0


@dataclass(frozen=True)
class RelayConfig:
    teams_webhook_url: str
    tfe_webhook_token: str | None = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        validate_webhook_url(self.teams_webhook_url)
        if not math.isfinite(self.timeout_seconds) or self.timeout_seconds <= 0:
            raise ConfigurationError(f"{_TIMEOUT_ENV} must be a positive number")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RelayConfig:
        env = os.environ if environ is None else environ

        url = env.get(_WEBHOOK_URL_ENV, "").strip()
        if not url:
            raise ConfigurationError(f"{_WEBHOOK_URL_ENV} is not set in the environment")

        token = env.get(_WEBHOOK_TOKEN_ENV, "").strip() or None

        raw_timeout = env.get(_TIMEOUT_ENV, "").strip()
        timeout = DEFAULT_TIMEOUT_SECONDS
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError as exc:
                raise ConfigurationError(f"{_TIMEOUT_ENV} must be a positive number") from exc

        return cls(teams_webhook_url=url, tfe_webhook_token=token, timeout_seconds=timeout)


def validate_webhook_url(url: str) -> None:
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise ConfigurationError(f"{_WEBHOOK_URL_ENV} is not a valid URL") from exc
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise ConfigurationError(f"{_WEBHOOK_URL_ENV} must be an absolute http(s) URL")
