"""
tfe_notify.models — Inbound TFE notification and outbound Teams MessageCard schemas.

Inbound (Terraform Cloud / Enterprise notification, payload version 1):
    NotificationPayload  — run and workspace metadata plus notification entries
    NotificationEntry    — a single run-lifecycle event (only the first is used)

Outbound (Microsoft Teams MessageCard):
    MessageCard → Section → Fact
                → PotentialAction

Every model is a frozen dataclass. Nothing outlives the request that built it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from tfe_notify.exceptions import MalformedPayloadError

SUPPORTED_PAYLOAD_VERSION: int = 1

MESSAGE_CARD_TYPE = "MessageCard"
MESSAGE_CARD_CONTEXT = "https://schema.org/extensions"

# TFE serialises unset timestamps as the zero time rather than null.
_ZERO_TIME = datetime(1, 1, 1, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Triggers and theme colours
# ---------------------------------------------------------------------------


class RunTrigger(StrEnum):
    CREATED = "run:created"
    PLANNING = "run:planning"
    NEEDS_ATTENTION = "run:needs_attention"
    APPLYING = "run:applying"
    COMPLETED = "run:completed"
    ERRORED = "run:errored"


TRIGGER_COLOURS: MappingProxyType[str, str] = MappingProxyType(
    {
        RunTrigger.CREATED: "#595959",
        RunTrigger.PLANNING: "#13c2c2",
        RunTrigger.NEEDS_ATTENTION: "#fadb14",
        RunTrigger.APPLYING: "#1890ff",
        RunTrigger.COMPLETED: "#a0d911",
        RunTrigger.ERRORED: "#f5222d",
    }
)


# ---------------------------------------------------------------------------
# Field coercion helpers
# ---------------------------------------------------------------------------


def _str_field(data: dict[str, Any], name: str) -> str:
    value = data.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedPayloadError(f"{name} must be a string")
    return value


def _int_field(data: dict[str, Any], name: str) -> int:
    value = data.get(name)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedPayloadError(f"{name} must be an integer")
    return value


def parse_timestamp(value: Any, *, field_name: str) -> datetime | None:
    """Parse an RFC 3339 timestamp; null, empty and zero-time values become None."""
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise MalformedPayloadError(f"{field_name} must be an RFC 3339 string")
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise MalformedPayloadError(f"{field_name} is not a valid timestamp") from exc
    instant = parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)
    if instant == _ZERO_TIME:
        return None
    return parsed


# ---------------------------------------------------------------------------
# Inbound: TFE notification payload
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NotificationEntry:
    """One run-lifecycle event. run_status is informational only."""

    message: str = ""
    trigger: str = ""
    run_status: str = ""
    run_updated_at: datetime | None = None
    run_updated_by: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> NotificationEntry:
        if not isinstance(data, dict):
            raise MalformedPayloadError("notifications entries must be objects")
        return cls(
            message=_str_field(data, "message"),
            trigger=_str_field(data, "trigger"),
            run_status=_str_field(data, "run_status"),
            run_updated_at=parse_timestamp(
                data.get("run_updated_at"), field_name="run_updated_at"
            ),
            run_updated_by=_str_field(data, "run_updated_by"),
        )


@dataclass(frozen=True)
class NotificationPayload:
    """TFE notification payload.

    Missing keys and JSON null decode to "" / None / 0 so that a version
    check can still run on sparse documents. Values of the wrong JSON type
    raise MalformedPayloadError.
    """

    payload_version: int
    run_url: str = ""
    run_id: str = ""
    run_message: str = ""
    run_created_at: datetime | None = None
    run_created_by: str = ""
    workspace_id: str = ""
    workspace_name: str = ""
    organization_name: str = ""
    notification_configuration_id: str = ""
    notifications: tuple[NotificationEntry, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> NotificationPayload:
        if not isinstance(data, dict):
            raise MalformedPayloadError("Notification payload must be a JSON object")

        raw_notifications = data.get("notifications") or []
        if not isinstance(raw_notifications, list):
            raise MalformedPayloadError("notifications must be a list")

        return cls(
            payload_version=_int_field(data, "payload_version"),
            run_url=_str_field(data, "run_url"),
            run_id=_str_field(data, "run_id"),
            run_message=_str_field(data, "run_message"),
            run_created_at=parse_timestamp(
                data.get("run_created_at"), field_name="run_created_at"
            ),
            run_created_by=_str_field(data, "run_created_by"),
            workspace_id=_str_field(data, "workspace_id"),
            workspace_name=_str_field(data, "workspace_name"),
            organization_name=_str_field(data, "organization_name"),
            notification_configuration_id=_str_field(data, "notification_configuration_id"),
            notifications=tuple(NotificationEntry.from_dict(n) for n in raw_notifications),
        )


# ---------------------------------------------------------------------------
# Outbound: Teams MessageCard
# Empty optional strings are omitted from the wire form.
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Fact:
    name: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class Section:
    activity_title: str = ""
    activity_subtitle: str = ""
    facts: tuple[Fact, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.activity_title:
            out["activityTitle"] = self.activity_title
        if self.activity_subtitle:
            out["activitySubtitle"] = self.activity_subtitle
        if self.facts:
            out["facts"] = [f.to_dict() for f in self.facts]
        return out


@dataclass(frozen=True)
class PotentialAction:
    """An OpenUri action. Always exactly one default-OS target."""

    uri: str
    type: str = "OpenUri"
    name: str = "View Run"

    @property
    def targets(self) -> tuple[dict[str, str], ...]:
        return ({"os": "default", "uri": self.uri},)

    def to_dict(self) -> dict[str, Any]:
        return {
            "@type": self.type,
            "name": self.name,
            "targets": [dict(t) for t in self.targets],
        }


@dataclass(frozen=True)
class MessageCard:
    summary: str = ""
    title: str = ""
    text: str = ""
    theme_color: str = ""
    sections: tuple[Section, ...] = ()
    potential_actions: tuple[PotentialAction, ...] = ()
    type: str = field(default=MESSAGE_CARD_TYPE)
    context: str = field(default=MESSAGE_CARD_CONTEXT)

    def to_dict(self) -> dict[str, Any]:
        """Render the Teams MessageCard JSON schema."""
        out: dict[str, Any] = {"@type": self.type, "@context": self.context}
        if self.summary:
            out["summary"] = self.summary
        if self.title:
            out["title"] = self.title
        if self.text:
            out["text"] = self.text
        if self.theme_color:
            out["themeColor"] = self.theme_color
        if self.sections:
            out["sections"] = [s.to_dict() for s in self.sections]
        if self.potential_actions:
            out["potentialAction"] = [a.to_dict() for a in self.potential_actions]
        return out
